"""
Error taxonomy shared by every pipeline stage.

Stages raise these (wrapping third-party errors with ``raise ... from``) and
let them bubble to the driver, which prints the message and exits 1.
"""


class PipelineError(Exception):
    """Base class for every failure the pipeline reports"""
    pass


class InvalidInput(PipelineError):
    """Bad URL, missing CLI arguments, malformed timestamps"""
    pass


class InvalidTimeFormat(InvalidInput):
    """Time expression is not SS, MM:SS or HH:MM:SS"""
    pass


class InvalidURLError(InvalidInput):
    """URL does not match the YouTube URL grammar"""
    pass


class UsageError(InvalidInput):
    """Command line arguments are missing"""
    pass


class ExternalToolFailure(PipelineError):
    """A local executable failed or is missing"""
    pass


class MediaToolError(ExternalToolFailure):
    """ffmpeg exited nonzero or could not be started"""
    pass


class ExternalServiceFailure(PipelineError):
    """A remote service call failed"""
    pass


class VideoDownloadError(ExternalServiceFailure):
    pass


class StorageError(ExternalServiceFailure):
    pass


class TranscriptionServiceError(ExternalServiceFailure):
    pass


class SummarizationError(ExternalServiceFailure):
    pass


class TranscriptionJobFailed(PipelineError):
    """Transcription job reached a terminal state other than COMPLETED"""

    def __init__(self, job_name: str, status: str, reason: str = None):
        self.job_name = job_name
        self.status = status
        self.reason = reason
        message = f"Transcription job {job_name} ended with status {status}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
