"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from config import AppConfig, DownloadConfig, MediaConfig, ProcessingConfig, TranscriptionConfig

ALIASED = [
    "AWS_REGION",
    "AWS_S3_BUCKET",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "YTS_TRANSCRIPTION_AWS_REGION",
    "YTS_TRANSCRIPTION_S3_BUCKET",
    "YTS_PROCESSING_OPENAI_API_KEY",
    "YTS_PROCESSING_OPENAI_MODEL",
    "YTS_PROCESSING_REGENERATE_SUMMARY",
    "YTS_TRANSCRIPTION_POLL_INTERVAL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate from the developer's shell and any .env file."""
    monkeypatch.chdir(tmp_path)
    for name in ALIASED:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_directories(self) -> None:
        assert DownloadConfig().youtube_dir == "__youtube"
        assert MediaConfig().talks_dir == "__talks"

    def test_transcription(self) -> None:
        tc = TranscriptionConfig()
        assert tc.poll_interval == 5
        assert tc.language_code == "en-US"
        assert tc.s3_bucket is None

    def test_processing(self) -> None:
        pc = ProcessingConfig()
        assert pc.max_tokens == 1024
        assert pc.regenerate_summary is False

    def test_app_config_aggregates(self) -> None:
        app = AppConfig()
        assert app.media.audio_bitrate == "320k"
        assert app.debug is False


class TestEnvironment:
    def test_conventional_aws_names(self, monkeypatch) -> None:
        monkeypatch.setenv("AWS_REGION", "eu-west-1")
        monkeypatch.setenv("AWS_S3_BUCKET", "my-talks")
        tc = TranscriptionConfig()
        assert tc.aws_region == "eu-west-1"
        assert tc.s3_bucket == "my-talks"

    def test_prefixed_name_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("AWS_REGION", "eu-west-1")
        monkeypatch.setenv("YTS_TRANSCRIPTION_AWS_REGION", "us-west-2")
        assert TranscriptionConfig().aws_region == "us-west-2"

    def test_openai_key(self, monkeypatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert ProcessingConfig().openai_api_key == "sk-test"

    def test_regenerate_flag(self, monkeypatch) -> None:
        monkeypatch.setenv("YTS_PROCESSING_REGENERATE_SUMMARY", "true")
        assert ProcessingConfig().regenerate_summary is True

    def test_dotenv_file(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("AWS_S3_BUCKET=from-dotenv\n")
        assert TranscriptionConfig().s3_bucket == "from-dotenv"

    def test_poll_interval_must_be_positive(self, monkeypatch) -> None:
        monkeypatch.setenv("YTS_TRANSCRIPTION_POLL_INTERVAL", "0")
        with pytest.raises(ValidationError):
            TranscriptionConfig()
