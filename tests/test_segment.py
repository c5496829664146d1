"""Tests for ffmpeg invocation and the talk segmentation stage."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from core.artifacts import ArtifactStore, partial_path
from core.errors import InvalidTimeFormat, MediaToolError
from core.segment import FFmpeg, splice_talk


class TestFFmpeg:
    def test_trim_command(self, tmp_path: Path) -> None:
        with patch("core.segment.subprocess.run") as run:
            FFmpeg().trim(tmp_path / "in.mp4", 930, 6320, tmp_path / "out.mp4")

        cmd = run.call_args[0][0]
        assert cmd == [
            "ffmpeg", "-i", str(tmp_path / "in.mp4"),
            "-ss", "930", "-to", "6320",
            "-c", "copy", "-y", str(tmp_path / "out.mp4"),
        ]
        assert run.call_args[1]["check"] is True

    def test_extract_audio_command(self, tmp_path: Path) -> None:
        with patch("core.segment.subprocess.run") as run:
            FFmpeg(audio_bitrate="128k", audio_sample_rate=22050).extract_audio(
                tmp_path / "clip.mp4", tmp_path / "clip.mp3"
            )

        cmd = run.call_args[0][0]
        assert cmd[:3] == ["ffmpeg", "-i", str(tmp_path / "clip.mp4")]
        assert "-vn" in cmd
        assert cmd[cmd.index("-ab") + 1] == "128k"
        assert cmd[cmd.index("-ar") + 1] == "22050"
        assert cmd[-1] == str(tmp_path / "clip.mp3")

    def test_nonzero_exit_raises(self, tmp_path: Path) -> None:
        error = subprocess.CalledProcessError(1, ["ffmpeg"])
        with patch("core.segment.subprocess.run", side_effect=error):
            with pytest.raises(MediaToolError):
                FFmpeg().trim(tmp_path / "in.mp4", 0, 1, tmp_path / "out.mp4")

    def test_missing_binary(self) -> None:
        with patch("core.segment.subprocess.run", side_effect=FileNotFoundError("ffmpeg")):
            with pytest.raises(MediaToolError, match="not installed"):
                FFmpeg().ensure_installed()


class TestSpliceTalk:
    def _store(self, tmp_path: Path) -> ArtifactStore:
        store = ArtifactStore(tmp_path / "__youtube", tmp_path / "__talks")
        store.ensure_directories()
        return store

    def test_creates_clip_and_audio(self, tmp_path: Path, fake_media) -> None:
        store = self._store(tmp_path)
        video = store.video_path("abc123")
        video.write_bytes(b"video")

        base = splice_talk("Test Talk", "00:15:30,01:45:20", video, store, fake_media)

        assert base == tmp_path / "__talks" / "Test_Talk"
        assert fake_media.calls == [
            ("trim", video, 930, 6320),
            ("extract_audio", tmp_path / "__talks" / "Test_Talk.mp4"),
        ]
        assert (tmp_path / "__talks" / "Test_Talk.mp4").exists()
        assert (tmp_path / "__talks" / "Test_Talk.mp3").exists()

    def test_second_call_makes_no_tool_calls(self, tmp_path: Path, fake_media) -> None:
        store = self._store(tmp_path)
        video = store.video_path("abc123")
        video.write_bytes(b"video")

        first = splice_talk("Test Talk", "60,120", video, store, fake_media)
        calls_after_first = len(fake_media.calls)
        second = splice_talk("Test Talk", "60,120", video, store, fake_media)

        assert first == second
        assert len(fake_media.calls) == calls_after_first

    def test_only_missing_audio_is_regenerated(self, tmp_path: Path, fake_media) -> None:
        store = self._store(tmp_path)
        base = store.talk_base("Test Talk")
        store.clip_path(base).write_bytes(b"clip")

        splice_talk("Test Talk", "60,120", store.video_path("x"), store, fake_media)

        assert [c[0] for c in fake_media.calls] == ["extract_audio"]

    def test_failed_trim_leaves_no_clip(self, tmp_path: Path, fake_media) -> None:
        store = self._store(tmp_path)

        def broken_trim(source, start, end, output):
            Path(output).write_bytes(b"partial")
            raise MediaToolError("ffmpeg exited with status 1")

        fake_media.trim = broken_trim
        with pytest.raises(MediaToolError):
            splice_talk("Test Talk", "60,120", store.video_path("x"), store, fake_media)

        clip = store.clip_path(store.talk_base("Test Talk"))
        assert not clip.exists()
        assert not partial_path(clip).exists()

    def test_bad_timestamps(self, tmp_path: Path, fake_media) -> None:
        with pytest.raises(InvalidTimeFormat):
            splice_talk("T", "1:2:3:4,5", tmp_path / "v.mp4", self._store(tmp_path), fake_media)
        assert fake_media.calls == []
