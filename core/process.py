"""
AI Processing Module

Single responsibility: transcript text → Markdown summary (description + article)
Two sequential chat completion requests over the full transcript.
"""

from pathlib import Path

import structlog
from openai import OpenAIError
from pydantic import BaseModel, Field

from core.artifacts import ArtifactStore, artifact_exists, write_text_artifact
from core.errors import SummarizationError

# Configure structured logger
logger = structlog.get_logger(__name__)

DESCRIPTION_PROMPT = """given this transcript from an audio file (with possible parts missing)

{transcript}

generate a summary of the talk for video description purposes"""

ARTICLE_PROMPT = """given this transcript from an audio file (with possible parts missing)

{transcript}

give me an article from this content. along with the q&a section at the end"""


class TalkSummary(BaseModel):
    """Model output for one talk"""

    title: str = Field(description="Talk base name")
    description: str = Field(default="", description="Video-description-length summary")
    article: str = Field(default="", description="Long-form article with Q&A")

    def to_markdown(self) -> str:
        return (
            f"# {self.title}\n"
            f"\n"
            f"## Description\n"
            f"{self.description}\n"
            f"\n"
            f"## Article\n"
            f"{self.article}\n"
        )


def complete(client, model: str, prompt: str, max_tokens: int) -> str:
    """Single completion; a response without text content yields ''"""

    try:
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
        )
    except OpenAIError as e:
        logger.error("Completion request failed", model=model, error=str(e))
        raise SummarizationError(f"Language model request failed: {e}") from e

    content = response.choices[0].message.content if response.choices else None
    if not isinstance(content, str):
        logger.warning("Model returned no text content", model=model)
        return ""
    return content


def generate_summary(
    talk_base: Path,
    client,
    model: str,
    max_tokens: int = 1024,
    regenerate: bool = False
) -> Path:
    """Write the description + article report next to the transcript"""

    transcript_path = ArtifactStore.transcript_path(talk_base)
    summary_path = ArtifactStore.summary_path(talk_base)

    if not regenerate and artifact_exists(summary_path, "Summary"):
        return summary_path

    transcript = transcript_path.read_text(encoding='utf-8')
    logger.info("Generating summary", model=model, char_count=len(transcript))

    summary = TalkSummary(
        title=Path(talk_base).name,
        description=complete(
            client, model, DESCRIPTION_PROMPT.format(transcript=transcript), max_tokens
        ),
        article=complete(
            client, model, ARTICLE_PROMPT.format(transcript=transcript), max_tokens
        ),
    )

    write_text_artifact(summary_path, summary.to_markdown())
    logger.info("Generated summary", path=str(summary_path))
    return summary_path
