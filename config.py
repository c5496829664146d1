"""
Configuration management for the YouTube talk summarizer

Using pydantic-settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables with the YTS_ prefix.
The conventional AWS_REGION, AWS_S3_BUCKET, OPENAI_API_KEY and OPENAI_MODEL
variables are accepted as well.
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DownloadConfig(BaseSettings):
    """Configuration for YouTube download functionality"""

    model_config = SettingsConfigDict(
        env_prefix='YTS_DOWNLOAD_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    youtube_dir: str = Field(
        default="__youtube",
        description="Directory holding full source videos, keyed by video ID"
    )

    video_format: str = Field(
        default="best[acodec!=none][vcodec!=none]/best",
        description="yt-dlp format selector for the source video"
    )

    socket_timeout: int = Field(
        default=300,
        description="Download socket timeout in seconds",
        ge=30,
        le=1800
    )


class MediaConfig(BaseSettings):
    """Configuration for clip trimming and audio extraction"""

    model_config = SettingsConfigDict(
        env_prefix='YTS_MEDIA_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    talks_dir: str = Field(
        default="__talks",
        description="Directory holding per-talk artifacts"
    )

    ffmpeg_binary: str = Field(
        default="ffmpeg",
        description="ffmpeg executable name or path"
    )

    audio_bitrate: str = Field(
        default="320k",
        description="Bitrate of the extracted mp3"
    )

    audio_sample_rate: int = Field(
        default=44100,
        description="Sample rate of the extracted mp3",
        ge=8000,
        le=192000
    )


class TranscriptionConfig(BaseSettings):
    """Configuration for Amazon Transcribe"""

    model_config = SettingsConfigDict(
        env_prefix='YTS_TRANSCRIPTION_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        populate_by_name=True
    )

    aws_region: Optional[str] = Field(
        default=None,
        description="AWS region for S3 and Transcribe",
        validation_alias=AliasChoices('YTS_TRANSCRIPTION_AWS_REGION', 'AWS_REGION')
    )

    s3_bucket: Optional[str] = Field(
        default=None,
        description="Bucket receiving uploaded audio and job output",
        validation_alias=AliasChoices('YTS_TRANSCRIPTION_S3_BUCKET', 'AWS_S3_BUCKET')
    )

    key_prefix: str = Field(
        default="audio/",
        description="Object key prefix for uploaded audio"
    )

    language_code: str = Field(
        default="en-US",
        description="Language of the talk audio"
    )

    media_format: str = Field(
        default="mp3",
        description="Media format passed to Transcribe"
    )

    poll_interval: float = Field(
        default=5,
        description="Seconds between job status checks",
        gt=0,
        le=300
    )


class ProcessingConfig(BaseSettings):
    """Configuration for AI processing"""

    model_config = SettingsConfigDict(
        env_prefix='YTS_PROCESSING_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        populate_by_name=True
    )

    openai_api_key: Optional[str] = Field(
        default=None,
        description="OpenAI API key for AI processing",
        validation_alias=AliasChoices('YTS_PROCESSING_OPENAI_API_KEY', 'OPENAI_API_KEY')
    )

    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model to use for processing",
        validation_alias=AliasChoices('YTS_PROCESSING_OPENAI_MODEL', 'OPENAI_MODEL')
    )

    max_tokens: int = Field(
        default=1024,
        description="Output cap for each completion",
        ge=1,
        le=16384
    )

    api_timeout: int = Field(
        default=120,
        description="OpenAI API timeout in seconds",
        ge=30,
        le=600
    )

    regenerate_summary: bool = Field(
        default=False,
        description="Rewrite an existing summary instead of keeping it"
    )


class AppConfig(BaseSettings):
    """Main application configuration"""

    model_config = SettingsConfigDict(
        env_prefix='YTS_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'  # Ignore unknown environment variables
    )

    # Sub-configurations
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    media: MediaConfig = Field(default_factory=MediaConfig)
    transcription: TranscriptionConfig = Field(default_factory=TranscriptionConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)

    # Global settings
    debug: bool = Field(
        default=False,
        description="Enable debug logging"
    )


# Global configuration instance
config = AppConfig()
