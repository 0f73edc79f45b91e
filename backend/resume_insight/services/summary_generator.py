"""
Recruiter summary generation with Gemini (google-genai SDK).

Resume text and job description are interpolated into the prompt verbatim.
Nothing is escaped or filtered, so a resume can steer the model (prompt
injection). That risk is accepted; any sanitizer must be added as its own
visible pipeline stage rather than hidden in these templates.
"""
import asyncio
import logging
from enum import Enum
from typing import Optional, Tuple

import httpx
from google import genai
from google.genai import errors, types

from ..config import Settings
from ..exceptions import GenerationFailed

logger = logging.getLogger(__name__)


class PromptMode(str, Enum):
    GENERAL = "general"
    COMPARISON = "comparison"


FIT_LABELS = ("Strong Fit", "Potential Fit", "Not a Fit")
HIRE_LABELS = ("Hire", "No Hire")


# ============================================================================
# Prompt Templates
# ============================================================================

COMPARISON_PROMPT = """
You are a senior recruiter.
Compare the following resume with the provided job description. Write a clear, concise, and professional comparison summary (max 4 sentences):
- Highlight matching skills, experience, and qualifications.
- Point out any gaps or missing requirements.
- Assess the overall fit for the role.
- End with a simple recommendation: "Strong Fit", "Potential Fit", or "Not a Fit".
- Write nothing after the recommendation.

Resume:
{resume_text}

Job Description:
{job_description}
"""

GENERAL_PROMPT = """
You are a senior recruiter.
Read the resume below and provide a clear, concise summary (maximum 5 sentences total).
Include: the candidate's overall background, experience level, clarity of the resume, and professionalism.
End your response with a simple recommendation: "Hire" or "No Hire".

Resume:
{resume_text}
"""


def select_prompt_mode(job_description: Optional[str]) -> PromptMode:
    """Comparison mode only when the job description has non-whitespace content."""
    if job_description and job_description.strip():
        return PromptMode.COMPARISON
    return PromptMode.GENERAL


def build_prompt(resume_text: str, job_description: Optional[str] = None) -> Tuple[PromptMode, str]:
    mode = select_prompt_mode(job_description)
    if mode == PromptMode.COMPARISON:
        prompt = COMPARISON_PROMPT.format(resume_text=resume_text, job_description=job_description)
    else:
        prompt = GENERAL_PROMPT.format(resume_text=resume_text)
    return mode, prompt


def build_genai_client(settings: Settings) -> Optional[genai.Client]:
    """Create the Gemini client once at startup; None when no API key is configured."""
    if not settings.gemini_api_key:
        return None
    return genai.Client(
        api_key=settings.gemini_api_key,
        http_options=types.HttpOptions(timeout=int(settings.ai_timeout_seconds * 1000)),
    )


def _safe_get(obj, *keys):
    """Safely traverse nested dict/object/list, returning None on any missing level."""
    for key in keys:
        if obj is None:
            return None
        if isinstance(key, int):
            try:
                obj = obj[key]
            except (IndexError, KeyError, TypeError):
                return None
        elif isinstance(obj, dict):
            obj = obj.get(key)
        else:
            obj = getattr(obj, key, None)
    return obj


def extract_candidate_text(response) -> str:
    """Read candidates[0].content.parts[0].text, or "" when any level is missing."""
    text = _safe_get(response, "candidates", 0, "content", "parts", 0, "text")
    return text if isinstance(text, str) else ""


class SummaryGenerator:
    """
    Single request/response Gemini call per summary. No streaming, no retry.

    Settings and the Gemini client are injected at startup so the generator can
    be exercised in isolation with a fake client.
    """

    def __init__(self, settings: Settings, client: Optional[genai.Client]):
        self.api_key = settings.gemini_api_key
        self.model = settings.gemini_model
        self.timeout = settings.ai_timeout_seconds
        self.client = client

    async def generate_summary(self, resume_text: str, job_description: Optional[str] = None) -> str:
        """
        Generate a recruiter summary for the resume text.

        Args:
            resume_text: Non-empty text extracted from the resume
            job_description: Optional role description; switches to comparison mode

        Returns:
            The stripped summary text

        Raises:
            GenerationFailed: missing API key, API error status, transport
                error or timeout, or an empty summary
        """
        if not self.api_key or self.client is None:
            raise GenerationFailed("GEMINI_API_KEY is not set")

        mode, prompt = build_prompt(resume_text, job_description)

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
            )
        except errors.APIError as e:
            raise GenerationFailed(f"Gemini API error ({e.code}): {e.message}") from e
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise GenerationFailed(f"Gemini request timed out after {self.timeout}s") from e
        except (httpx.HTTPError, OSError) as e:
            raise GenerationFailed(f"Gemini request failed: {e}") from e

        summary = extract_candidate_text(response).strip()
        if not summary:
            raise GenerationFailed("Gemini did not return a summary")

        logger.info(f"Generated {mode.value} summary ({len(summary)} chars)")
        return summary
