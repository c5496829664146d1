#!/usr/bin/env python3
"""
YouTube Talk Summarizer - Main Orchestrator

Cuts a talk out of a longer YouTube video and produces its transcript and an
AI-written description + article.
Handles the complete pipeline: URL → Source video → Clip + Audio → Transcript → Summary
"""

import logging
import sys
import time
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

import structlog
from botocore.exceptions import BotoCoreError
from dotenv import load_dotenv
from openai import OpenAI, OpenAIError
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

from config import config, AppConfig
from core.artifacts import ArtifactStore, sanitize_title
from core.download import YoutubeClient, download_video
from core.errors import (
    PipelineError,
    InvalidInput,
    ExternalToolFailure,
    ExternalServiceFailure,
    TranscriptionJobFailed,
    TranscriptionServiceError,
    SummarizationError,
    UsageError
)
from core.segment import FFmpeg, splice_talk
from core.transcribe import AWSTranscriber, generate_transcript
from core.process import generate_summary

logger = structlog.get_logger(__name__)

USAGE = (
    "Usage: python main.py [YouTube URL] [timestamps] [title]\n"
    "Example: python main.py https://youtube.com/watch?v=example "
    "00:15:30,01:45:20 'Understanding AI Systems'"
)


class PipelineRun(BaseModel):
    """One pipeline run and the artifacts it produced"""

    run_id: str = Field(description="Unique run identifier")
    url: str
    title: str
    start_time: datetime = Field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    status: str = Field(default="running", description="Run status")
    error_message: Optional[str] = None

    video_path: Optional[Path] = None
    talk_base: Optional[Path] = None
    transcript_path: Optional[Path] = None
    summary_path: Optional[Path] = None

    def duration_seconds(self) -> float:
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()

    def mark_completed(self):
        self.end_time = datetime.now()
        self.status = "completed"

    def mark_failed(self, error: str):
        self.end_time = datetime.now()
        self.status = "failed"
        self.error_message = error


class ProgressTracker:
    """Step headers on the console plus structured step events"""

    def __init__(self):
        self.step_names = [
            "Reading YouTube video",
            "Extracting talk segment",
            "Generating transcript",
            "Generating AI summary and article"
        ]
        self.total_steps = len(self.step_names)

    def start_step(self, step_index: int):
        step_name = self.step_names[step_index]
        print(f"\n{step_index + 1}. {step_name}...")
        logger.info("Processing step started",
                    step=step_name,
                    step_index=step_index,
                    progress_percent=(step_index / self.total_steps) * 100)

    def complete_step(self, step_index: int):
        logger.info("Processing step completed",
                    step=self.step_names[step_index],
                    step_index=step_index,
                    progress_percent=((step_index + 1) / self.total_steps) * 100)

    def show_final_summary(self, run: PipelineRun, talks_dir: Path):
        print("\nProcess completed successfully!")
        print(f"Output files are in: {talks_dir}/{sanitize_title(run.title)}.*")
        logger.info("Run finished",
                    run_id=run.run_id,
                    duration_seconds=round(run.duration_seconds(), 1))


def configure_logging(debug: bool = False):
    """Route structlog through stdlib logging at INFO (DEBUG when debugging)"""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )

    # Configure structured logging
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False)
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def generate_run_id() -> str:
    """Timestamp plus a short UUID suffix"""
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return f"{timestamp}_{str(uuid.uuid4())[:8]}"


class Pipeline:
    """Wires the stages together; collaborators are injectable

    Cloud clients are created on first use so missing credentials only
    surface when their stage runs.
    """

    def __init__(
        self,
        settings: AppConfig,
        youtube: YoutubeClient = None,
        media: FFmpeg = None,
        transcriber: AWSTranscriber = None,
        llm_client=None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.settings = settings
        self.store = ArtifactStore(settings.download.youtube_dir, settings.media.talks_dir)
        self.youtube = youtube or YoutubeClient(
            video_format=settings.download.video_format,
            socket_timeout=settings.download.socket_timeout
        )
        self.media = media or FFmpeg(
            binary=settings.media.ffmpeg_binary,
            audio_bitrate=settings.media.audio_bitrate,
            audio_sample_rate=settings.media.audio_sample_rate
        )
        self._transcriber = transcriber
        self._llm_client = llm_client
        self.sleep = sleep

    @property
    def transcriber(self) -> AWSTranscriber:
        if self._transcriber is None:
            tc = self.settings.transcription
            try:
                self._transcriber = AWSTranscriber(
                    bucket=tc.s3_bucket,
                    region=tc.aws_region,
                    key_prefix=tc.key_prefix,
                    language_code=tc.language_code,
                    media_format=tc.media_format
                )
            except BotoCoreError as e:
                raise TranscriptionServiceError(f"Could not create AWS clients: {e}") from e
        return self._transcriber

    @property
    def llm_client(self):
        if self._llm_client is None:
            pc = self.settings.processing
            try:
                self._llm_client = OpenAI(api_key=pc.openai_api_key, timeout=pc.api_timeout)
            except OpenAIError as e:
                raise SummarizationError(f"Could not create OpenAI client: {e}") from e
        return self._llm_client

    def run(self, url: str, timestamps: str, title: str) -> PipelineRun:
        """Run every stage in order; failures are recorded on the returned run"""

        run = PipelineRun(run_id=generate_run_id(), url=url, title=title)
        progress = ProgressTracker()

        logger.info("Starting talk processing",
                    run_id=run.run_id, url=url, timestamps=timestamps, title=title)

        try:
            self.media.ensure_installed()
            self.store.ensure_directories()

            progress.start_step(0)
            run.video_path = download_video(url, self.store, self.youtube)
            progress.complete_step(0)

            progress.start_step(1)
            run.talk_base = splice_talk(title, timestamps, run.video_path, self.store, self.media)
            progress.complete_step(1)

            progress.start_step(2)
            run.transcript_path = generate_transcript(
                run.talk_base,
                self.transcriber,
                poll_interval=self.settings.transcription.poll_interval,
                sleep=self.sleep
            )
            progress.complete_step(2)

            progress.start_step(3)
            pc = self.settings.processing
            run.summary_path = generate_summary(
                run.talk_base,
                self.llm_client,
                model=pc.openai_model,
                max_tokens=pc.max_tokens,
                regenerate=pc.regenerate_summary
            )
            progress.complete_step(3)

            run.mark_completed()
            progress.show_final_summary(run, self.store.talks_dir)
            return run

        except InvalidInput as e:
            logger.error("Invalid input", error=str(e))
            run.mark_failed(str(e))
        except ExternalToolFailure as e:
            logger.error("External tool failed", error=str(e))
            run.mark_failed(str(e))
        except TranscriptionJobFailed as e:
            logger.error("Transcription job failed", job_name=e.job_name, status=e.status)
            run.mark_failed(str(e))
        except ExternalServiceFailure as e:
            logger.error("External service failed", error=str(e))
            run.mark_failed(str(e))
        except PipelineError as e:
            logger.error("Pipeline failed", error=str(e))
            run.mark_failed(str(e))
        except Exception as e:
            logger.error("Unexpected error occurred", error=str(e))
            run.mark_failed(f"Unexpected error: {e}")

        return run


def parse_args(argv: List[str]):
    """Return (url, timestamps, title) or raise UsageError"""
    url, timestamps, title = (list(argv[:3]) + [None, None, None])[:3]
    if not url or not timestamps or not title:
        raise UsageError(USAGE)
    return url, timestamps, title


def main(argv: Optional[List[str]] = None):
    """Main entry point with argument parsing"""

    try:
        url, timestamps, title = parse_args(sys.argv[1:] if argv is None else argv)
    except UsageError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    configure_logging(config.debug)

    if config.debug:
        print("Debug mode enabled")
        print(f"AI Model: {config.processing.openai_model}")
        print()

    run = Pipeline(config).run(url, timestamps, title)

    if run.status == "completed":
        sys.exit(0)
    else:
        print(f"Error: {run.error_message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
