"""
Talk Segmentation Module

Single responsibility: source video + time range → talk clip + audio extract
Shells out to ffmpeg for a lossless cut and an mp3 transcode.
"""

import subprocess
from pathlib import Path
from typing import List

import structlog

from core.artifacts import ArtifactStore, artifact_exists, staged_output
from core.errors import MediaToolError
from core.timecode import parse_time_range

# Configure structured logger
logger = structlog.get_logger(__name__)


class FFmpeg:
    """Trim and audio-extraction capability backed by the ffmpeg executable"""

    def __init__(self, binary: str = 'ffmpeg', audio_bitrate: str = '320k',
                 audio_sample_rate: int = 44100):
        self.binary = binary
        self.audio_bitrate = audio_bitrate
        self.audio_sample_rate = audio_sample_rate

    def ensure_installed(self) -> None:
        try:
            subprocess.run([self.binary, '-version'], capture_output=True, check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise MediaToolError(
                f"{self.binary} is not installed or not in the system PATH"
            ) from e
        logger.info("ffmpeg is installed", binary=self.binary)

    def _run(self, cmd: List[str]) -> None:
        logger.debug("Running ffmpeg", cmd=' '.join(cmd))
        try:
            subprocess.run(cmd, check=True)
        except subprocess.CalledProcessError as e:
            raise MediaToolError(f"ffmpeg exited with status {e.returncode}") from e
        except OSError as e:
            raise MediaToolError(f"Could not run {self.binary}: {e}") from e

    def trim(self, source: Path, start: int, end: int, output: Path) -> Path:
        """Cut [start, end] seconds out of ``source`` without re-encoding"""
        self._run([
            self.binary, '-i', str(source),
            '-ss', str(start), '-to', str(end),
            '-c', 'copy', '-y', str(output)
        ])
        return output

    def extract_audio(self, source: Path, output: Path) -> Path:
        """Transcode the audio track of ``source`` to a fixed-rate mp3"""
        self._run([
            self.binary, '-i', str(source),
            '-vn', '-ab', self.audio_bitrate,
            '-ar', str(self.audio_sample_rate),
            '-y', str(output)
        ])
        return output


def splice_talk(
    title: str,
    timestamps: str,
    video_path: Path,
    store: ArtifactStore,
    media: FFmpeg
) -> Path:
    """Produce the talk clip and its audio; return the talk base path"""

    start, end = parse_time_range(timestamps)
    print(f"Splitting video from {start}s to {end}s")
    logger.info("Splitting video", start=start, end=end, source=str(video_path))

    talk_base = store.talk_base(title)
    clip_path = store.clip_path(talk_base)
    audio_path = store.audio_path(talk_base)

    if not artifact_exists(clip_path, "Talk clip"):
        with staged_output(clip_path) as temp:
            media.trim(Path(video_path), start, end, temp)
        logger.info("Talk clip created", path=str(clip_path))

    if not artifact_exists(audio_path, "Talk audio"):
        with staged_output(audio_path) as temp:
            media.extract_audio(clip_path, temp)
        logger.info("Talk audio extracted", path=str(audio_path))

    return talk_base
