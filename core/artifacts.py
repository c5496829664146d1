"""
Artifact Store - directory convention and existence cache

Every artifact lives under one of two roots:
- youtube_dir: full source videos, keyed by YouTube video ID
- talks_dir: per-talk outputs, keyed by the sanitized talk title

A stage treats an existing artifact as valid and skips its work. Writes go
through ``staged_output`` so a crashed step never leaves a file at the final
name.
"""

import os
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

import structlog

logger = structlog.get_logger(__name__)

CLIP_EXT = '.mp4'
AUDIO_EXT = '.mp3'
TRANSCRIPT_EXT = '.txt'
SUMMARY_EXT = '.md'
VIDEO_EXT = '.mp4'

PathLike = Union[str, Path]


def sanitize_title(title: str) -> str:
    """Replace every non-alphanumeric character with an underscore"""
    return re.sub(r'[^a-zA-Z0-9]', '_', title)


def with_suffix(base: PathLike, ext: str) -> Path:
    """Append an extension to an extensionless base path"""
    # Path.with_suffix would eat anything after a dot in the title
    return Path(f"{base}{ext}")


def artifact_exists(path: PathLike, label: str) -> bool:
    """Existence check used as the stage cache; logs cache hits"""
    path = Path(path)
    if path.exists():
        logger.info(f"{label} found", path=str(path))
        return True
    return False


def partial_path(path: PathLike) -> Path:
    """Temporary sibling name used while an artifact is being produced"""
    path = Path(path)
    return path.with_name(f"{path.stem}.part{path.suffix}")


@contextmanager
def staged_output(path: PathLike) -> Iterator[Path]:
    """Yield a temporary path and move it onto ``path`` only on success"""

    final = Path(path)
    temp = partial_path(final)
    if temp.exists():
        temp.unlink()

    try:
        yield temp
    except BaseException:
        if temp.exists():
            temp.unlink()
            logger.debug("Removed partial artifact", path=str(temp))
        raise

    os.replace(temp, final)


def write_text_artifact(path: PathLike, text: str) -> Path:
    """Write a text artifact atomically"""
    with staged_output(path) as temp:
        temp.write_text(text, encoding='utf-8')
    return Path(path)


class ArtifactStore:
    """Maps logical artifacts to file paths under the two root directories"""

    def __init__(self, youtube_dir: PathLike, talks_dir: PathLike):
        self.youtube_dir = Path(youtube_dir)
        self.talks_dir = Path(talks_dir)

    def ensure_directories(self) -> None:
        self.youtube_dir.mkdir(parents=True, exist_ok=True)
        self.talks_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Relevant directories created",
                    youtube_dir=str(self.youtube_dir),
                    talks_dir=str(self.talks_dir))

    def video_path(self, video_id: str) -> Path:
        return self.youtube_dir / f"{video_id}{VIDEO_EXT}"

    def talk_base(self, title: str) -> Path:
        """Extensionless base path shared by every artifact of one talk"""
        return self.talks_dir / sanitize_title(title)

    @staticmethod
    def clip_path(talk_base: PathLike) -> Path:
        return with_suffix(talk_base, CLIP_EXT)

    @staticmethod
    def audio_path(talk_base: PathLike) -> Path:
        return with_suffix(talk_base, AUDIO_EXT)

    @staticmethod
    def transcript_path(talk_base: PathLike) -> Path:
        return with_suffix(talk_base, TRANSCRIPT_EXT)

    @staticmethod
    def summary_path(talk_base: PathLike) -> Path:
        return with_suffix(talk_base, SUMMARY_EXT)
