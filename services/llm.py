# services/llm.py
import asyncio
import logging
import random
import time

import httpx
from google import genai
from google.genai import types, errors as gerrors
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.errors import UpstreamGenerationError
from services.db import GenerationFailure

_LOG = logging.getLogger(__name__)

# ───────────── Client (lazy) ─────────────
_client: genai.Client | None = None


def _get_client() -> genai.Client:
    global _client
    if _client is None:
        if not settings.gemini_api_key:
            raise UpstreamGenerationError("config", "GEMINI_API_KEY not set in environment")
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


def _rate_limited(exc: gerrors.APIError) -> bool:
    return getattr(exc, "status", None) == "RESOURCE_EXHAUSTED" or getattr(exc, "code", None) == 429


# ───────────── Generation (sync + retry) ─────────────
def generate(
    prompt: str,
    system: str | None = None,
    temperature: float | None = None,
    max_output_tokens: int | None = None,
    json_mode: bool = True,
) -> str:
    """Run a chat completion and return the LLM’s text response.

    Rate limits are retried with exponential backoff; every other failure,
    and an empty reply, surfaces as UpstreamGenerationError.
    """
    client = _get_client()
    config = types.GenerateContentConfig(
        system_instruction=system,
        temperature=settings.llm_temperature if temperature is None else temperature,
        max_output_tokens=max_output_tokens or settings.llm_max_output_tokens,
        response_mime_type="application/json" if json_mode else None,
    )

    for attempt in range(settings.llm_max_retries):
        try:
            resp = client.models.generate_content(
                model=settings.chat_model,
                contents=[prompt],
                config=config,
            )
        except gerrors.APIError as e:
            if _rate_limited(e):
                if attempt + 1 == settings.llm_max_retries:
                    break
                backoff = (2 ** attempt) + random.random()
                _LOG.warning("429 from %s, retrying in %.1fs", settings.chat_model, backoff)
                time.sleep(backoff)
                continue
            raise UpstreamGenerationError("generate", f"{settings.chat_model} error: {e}") from e
        except httpx.TransportError as e:
            # timeouts included
            raise UpstreamGenerationError("generate", f"{settings.chat_model} unreachable: {e!r}") from e

        text = resp.text
        if not text:
            raise UpstreamGenerationError("generate", "empty response from model")
        return text

    raise UpstreamGenerationError("generate", "rate limited, retries exhausted")


async def agenerate(prompt: str, **kwargs) -> str:
    """`generate` off the event loop."""
    return await asyncio.to_thread(generate, prompt, **kwargs)


# ───────────── Error Logging ─────────────
async def log_failure_to_db(
    db: AsyncSession,
    user_id: str,
    exc: UpstreamGenerationError,
    raw_input: str = "",
) -> None:
    """
    Persist a generation failure to the database.
    """
    failure = GenerationFailure(
        user_id=user_id,
        stage=exc.stage,
        error_message=exc.detail,
        raw_input=raw_input,
        raw_output=exc.raw_output,
    )
    db.add(failure)
    await db.commit()
