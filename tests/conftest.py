"""Shared fakes standing in for yt-dlp, ffmpeg, AWS and OpenAI."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional
from unittest.mock import MagicMock

import pytest

from core.download import YoutubeClient
from core.segment import FFmpeg
from core.transcribe import TranscriptionJob


class FakeYoutube(YoutubeClient):
    """Writes a few bytes instead of downloading."""

    def __init__(self) -> None:
        super().__init__()
        self.downloads: List[str] = []

    def download(self, url, target, on_progress=None) -> None:
        self.downloads.append(url)
        Path(target).write_bytes(b"video" * 100)
        if on_progress:
            on_progress(500)


class FakeMedia(FFmpeg):
    """Records trim/extract calls and writes placeholder files."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: List[tuple] = []

    def ensure_installed(self) -> None:
        self.calls.append(("ensure_installed",))

    def trim(self, source, start, end, output):
        self.calls.append(("trim", Path(source), start, end))
        Path(output).write_bytes(b"clip")
        return output

    def extract_audio(self, source, output):
        self.calls.append(("extract_audio", Path(source)))
        Path(output).write_bytes(b"audio")
        return output


class FakeTranscriber:
    """Job status source driven by a scripted list of statuses."""

    def __init__(self, statuses: List[str], text: str = "hello world",
                 failure_reason: Optional[str] = None) -> None:
        self.statuses = list(statuses)
        self.text = text
        self.failure_reason = failure_reason
        self.uploads: List[Path] = []
        self.started: List[tuple] = []
        self.polls = 0

    def upload_audio(self, audio_path) -> str:
        self.uploads.append(Path(audio_path))
        return f"s3://bucket/audio/{Path(audio_path).name}"

    def start_job(self, job_name: str, media_uri: str) -> None:
        self.started.append((job_name, media_uri))

    def get_job(self, job_name: str) -> TranscriptionJob:
        status = self.statuses[min(self.polls, len(self.statuses) - 1)]
        self.polls += 1
        return TranscriptionJob(
            name=job_name,
            status=status,
            transcript_uri="s3://bucket/out.json" if status == "COMPLETED" else None,
            failure_reason=self.failure_reason if status == "FAILED" else None,
        )

    def fetch_transcript(self, job: TranscriptionJob) -> str:
        return self.text


def make_completion(content) -> MagicMock:
    response = MagicMock()
    response.choices[0].message.content = content
    return response


def make_llm_client(*contents) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create.side_effect = [make_completion(c) for c in contents]
    return client


@pytest.fixture
def fake_youtube() -> FakeYoutube:
    return FakeYoutube()


@pytest.fixture
def fake_media() -> FakeMedia:
    return FakeMedia()


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""
    delays: List[float] = []

    def sleep(seconds: float) -> None:
        delays.append(seconds)

    sleep.delays = delays
    return sleep
