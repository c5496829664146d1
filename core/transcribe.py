"""
Audio Transcription Module

Single responsibility: talk audio file → transcript text
Uploads the audio to S3, runs an Amazon Transcribe job, polls it to a
terminal state and stores the first transcript as plain text.
"""

import json
import time
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse

import boto3
import requests
import structlog
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, Field
from tenacity import Retrying, retry_if_result, stop_never, wait_fixed

from core.artifacts import ArtifactStore, artifact_exists, write_text_artifact
from core.errors import StorageError, TranscriptionJobFailed, TranscriptionServiceError

# Configure structured logger
logger = structlog.get_logger(__name__)


class JobStatus:
    QUEUED = "QUEUED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    PENDING = (QUEUED, IN_PROGRESS)


class TranscriptionJob(BaseModel):
    """Snapshot of a remote transcription job"""

    name: str = Field(description="Transcription job name")
    status: str = Field(description="Job status reported by the service")
    transcript_uri: Optional[str] = Field(None, description="Result file URI once completed")
    failure_reason: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status in JobStatus.PENDING

    @classmethod
    def from_response(cls, job: dict) -> "TranscriptionJob":
        return cls(
            name=job.get('TranscriptionJobName', ''),
            status=job.get('TranscriptionJobStatus', 'UNKNOWN'),
            transcript_uri=(job.get('Transcript') or {}).get('TranscriptFileUri'),
            failure_reason=job.get('FailureReason'),
        )


def make_job_name(clock: Callable[[], float] = time.time) -> str:
    """Timestamp-based job name, unique per millisecond"""
    return f"transcription-job-{int(clock() * 1000)}"


def extract_transcript_text(payload: str) -> str:
    """Pull the first transcript string out of a Transcribe result document"""
    try:
        data = json.loads(payload)
        return data['results']['transcripts'][0]['transcript']
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise TranscriptionServiceError(f"Unexpected transcript document: {e}") from e


def split_s3_uri(uri: str, bucket: str) -> Optional[str]:
    """Return the object key if ``uri`` addresses an object in ``bucket``"""
    parsed = urlparse(uri)
    host = parsed.hostname or ''
    path = parsed.path.lstrip('/')

    if parsed.scheme == 's3':
        return path if host == bucket else None
    if not host.endswith('amazonaws.com'):
        return None
    # Virtual-hosted style: <bucket>.s3.<region>.amazonaws.com/<key>
    if host.startswith(f"{bucket}.s3"):
        return path
    # Path style: s3.<region>.amazonaws.com/<bucket>/<key>
    if path.startswith(f"{bucket}/"):
        return path[len(bucket) + 1:]
    return None


class AWSTranscriber:
    """S3 upload + Amazon Transcribe job operations"""

    def __init__(
        self,
        bucket: str,
        region: Optional[str] = None,
        key_prefix: str = 'audio/',
        language_code: str = 'en-US',
        media_format: str = 'mp3',
        s3_client=None,
        transcribe_client=None
    ):
        self.bucket = bucket
        self.key_prefix = key_prefix
        self.language_code = language_code
        self.media_format = media_format
        self.s3 = s3_client or boto3.client('s3', region_name=region)
        self.transcribe = transcribe_client or boto3.client('transcribe', region_name=region)

    def upload_audio(self, audio_path: Path) -> str:
        """Upload the audio file and return its s3:// URI"""
        key = f"{self.key_prefix}{Path(audio_path).name}"
        logger.info("Uploading audio to S3", bucket=self.bucket, key=key)

        try:
            with open(audio_path, 'rb') as f:
                self.s3.put_object(Bucket=self.bucket, Key=key, Body=f)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Audio upload failed: {e}") from e

        return f"s3://{self.bucket}/{key}"

    def start_job(self, job_name: str, media_uri: str) -> None:
        logger.info("Starting transcription job", job_name=job_name, media_uri=media_uri)
        try:
            self.transcribe.start_transcription_job(
                TranscriptionJobName=job_name,
                LanguageCode=self.language_code,
                MediaFormat=self.media_format,
                Media={'MediaFileUri': media_uri},
                OutputBucketName=self.bucket,
            )
        except (BotoCoreError, ClientError) as e:
            raise TranscriptionServiceError(f"Could not start transcription job: {e}") from e

    def get_job(self, job_name: str) -> TranscriptionJob:
        try:
            response = self.transcribe.get_transcription_job(TranscriptionJobName=job_name)
        except (BotoCoreError, ClientError) as e:
            raise TranscriptionServiceError(f"Could not poll transcription job: {e}") from e
        return TranscriptionJob.from_response(response['TranscriptionJob'])

    def fetch_transcript(self, job: TranscriptionJob) -> str:
        """Download the job's result document and return the transcript text"""
        if not job.transcript_uri:
            raise TranscriptionServiceError(f"Job {job.name} has no transcript URI")

        key = split_s3_uri(job.transcript_uri, self.bucket)
        if key is not None:
            logger.debug("Reading transcript from S3", bucket=self.bucket, key=key)
            try:
                body = self.s3.get_object(Bucket=self.bucket, Key=key)['Body'].read()
            except (BotoCoreError, ClientError) as e:
                raise StorageError(f"Could not read transcript: {e}") from e
            payload = body.decode('utf-8')
        else:
            logger.debug("Fetching transcript over HTTPS", uri=job.transcript_uri)
            try:
                response = requests.get(job.transcript_uri, timeout=60)
                response.raise_for_status()
            except requests.RequestException as e:
                raise TranscriptionServiceError(f"Could not fetch transcript: {e}") from e
            payload = response.text

        return extract_transcript_text(payload)


def _log_poll(retry_state) -> None:
    job = retry_state.outcome.result()
    logger.debug("Transcription job still running",
                 job_name=job.name,
                 status=job.status,
                 attempt=retry_state.attempt_number)


def wait_for_job(
    get_job: Callable[[str], TranscriptionJob],
    job_name: str,
    poll_interval: float = 5,
    sleep: Callable[[float], None] = time.sleep
) -> TranscriptionJob:
    """Poll until the job leaves QUEUED/IN_PROGRESS; return the terminal snapshot

    Fixed interval, no timeout. Errors raised by ``get_job`` propagate.
    """

    retryer = Retrying(
        retry=retry_if_result(lambda job: job.is_pending),
        wait=wait_fixed(poll_interval),
        stop=stop_never,
        sleep=sleep,
        before_sleep=_log_poll,
        reraise=True,
    )
    return retryer(get_job, job_name)


def generate_transcript(
    talk_base: Path,
    transcriber: AWSTranscriber,
    poll_interval: float = 5,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.time
) -> Path:
    """Transcribe the talk audio unless a transcript already exists"""

    audio_path = ArtifactStore.audio_path(talk_base)
    transcript_path = ArtifactStore.transcript_path(talk_base)
    logger.info("Generating transcript", audio=str(audio_path))

    if artifact_exists(transcript_path, "Transcript"):
        return transcript_path

    media_uri = transcriber.upload_audio(audio_path)

    job_name = make_job_name(clock)
    transcriber.start_job(job_name, media_uri)

    job = wait_for_job(transcriber.get_job, job_name, poll_interval, sleep)

    if job.status != JobStatus.COMPLETED:
        logger.error("Transcription job failed",
                     job_name=job_name,
                     status=job.status,
                     reason=job.failure_reason)
        raise TranscriptionJobFailed(job_name, job.status, job.failure_reason)

    text = transcriber.fetch_transcript(job)
    write_text_artifact(transcript_path, text)

    logger.info("Generated transcript",
                path=str(transcript_path),
                char_count=len(text))
    return transcript_path
