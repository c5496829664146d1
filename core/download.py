"""
YouTube Download Module

Single responsibility: YouTube URL → full source video file
Uses yt-dlp for the download and pydantic for the source model.
"""

import re
import sys
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse, parse_qs

import yt_dlp
import structlog
from pydantic import BaseModel, Field, validator

from core.artifacts import ArtifactStore, artifact_exists
from core.errors import InvalidURLError, VideoDownloadError

# Configure structured logger
logger = structlog.get_logger(__name__)

YOUTUBE_HOSTS = {'youtube.com', 'www.youtube.com', 'm.youtube.com', 'music.youtube.com'}
SHORT_HOSTS = {'youtu.be', 'www.youtu.be'}
ID_PATH_PREFIXES = ('/embed/', '/v/', '/shorts/', '/live/')

VIDEO_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')

# Best single file carrying both an audio and a video stream
DEFAULT_FORMAT = 'best[acodec!=none][vcodec!=none]/best'

ProgressCallback = Callable[[int], None]


class VideoSource(BaseModel):
    """A downloaded (or cached) source video"""

    video_id: str = Field(description="YouTube video ID")
    url: str = Field(description="Original YouTube URL")
    filepath: str = Field(description="Local path of the full video")

    @validator('video_id')
    def validate_video_id(cls, v):
        if not VIDEO_ID_PATTERN.match(v):
            raise ValueError("Invalid YouTube video ID")
        return v


def extract_video_id(url: str) -> Optional[str]:
    """Extract YouTube video ID from various URL formats"""
    try:
        parsed_url = urlparse(url.strip())
    except ValueError:
        return None

    if parsed_url.scheme not in ('http', 'https', ''):
        return None

    hostname = (parsed_url.hostname or '').lower()
    video_id = None

    if hostname in YOUTUBE_HOSTS:
        if parsed_url.path == '/watch':
            video_id = parse_qs(parsed_url.query).get('v', [None])[0]
        else:
            for prefix in ID_PATH_PREFIXES:
                if parsed_url.path.startswith(prefix):
                    video_id = parsed_url.path[len(prefix):].split('/')[0]
                    break
    elif hostname in SHORT_HOSTS:
        video_id = parsed_url.path.lstrip('/').split('/')[0]

    if video_id and VIDEO_ID_PATTERN.match(video_id):
        return video_id
    return None


def print_progress(downloaded_bytes: int) -> None:
    """Self-overwriting console progress line"""
    sys.stdout.write(f"Download progress: {round(downloaded_bytes / 1024 / 1024)}MB\r")
    sys.stdout.flush()


class YoutubeClient:
    """Thin wrapper around yt-dlp: URL validation, ID extraction, download"""

    def __init__(self, video_format: str = DEFAULT_FORMAT, socket_timeout: int = 300):
        self.video_format = video_format
        self.socket_timeout = socket_timeout

    def validate_url(self, url: str) -> bool:
        return extract_video_id(url) is not None

    def get_video_id(self, url: str) -> str:
        video_id = extract_video_id(url)
        if not video_id:
            raise InvalidURLError(f"Invalid YouTube URL: {url}")
        return video_id

    def download(self, url: str, target: Path, on_progress: ProgressCallback = None) -> None:
        """Download ``url`` to exactly ``target``

        yt-dlp writes to ``<target>.part`` and renames on completion, so an
        interrupted download never occupies the final name.
        """

        def progress_hook(d):
            if d['status'] == 'downloading' and on_progress:
                on_progress(d.get('downloaded_bytes') or 0)
            elif d['status'] == 'finished':
                logger.debug("Download completion hook triggered")

        ydl_opts = {
            'format': self.video_format,
            # outtmpl is a template; escape literal percent signs
            'outtmpl': str(target).replace('%', '%%'),
            'quiet': True,
            'no_warnings': True,
            'noprogress': True,
            'noplaylist': True,
            'socket_timeout': self.socket_timeout,
            'progress_hooks': [progress_hook],
        }

        try:
            with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                ydl.download([url])
        except yt_dlp.utils.DownloadError as e:
            raise VideoDownloadError(f"Download failed: {e}") from e


def download_video(
    url: str,
    store: ArtifactStore,
    client: YoutubeClient,
    on_progress: ProgressCallback = print_progress
) -> Path:
    """Fetch the source video into the store unless it is already there"""

    if not client.validate_url(url):
        logger.error("Invalid YouTube URL", url=url)
        raise InvalidURLError(f"Invalid YouTube URL: {url}")

    video_id = client.get_video_id(url)
    video_path = store.video_path(video_id)

    if artifact_exists(video_path, "Youtube video"):
        return video_path

    logger.info("Starting YouTube video download", video_id=video_id, url=url)
    client.download(url, video_path, on_progress)
    print()

    if not video_path.exists():
        raise VideoDownloadError(f"Downloaded video not found at {video_path}")

    source = VideoSource(video_id=video_id, url=url, filepath=str(video_path))
    logger.info("Youtube video downloaded",
                video_id=source.video_id,
                filepath=source.filepath,
                size_mb=video_path.stat().st_size / 1024 / 1024)

    return video_path
