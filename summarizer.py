"""Abstract summarization through a language-model API.

summarize() never raises: every failure mode maps to a fixed, displayable
sentinel string so a bad call cannot take down the article loop.
"""

from __future__ import annotations

import logging
import os

import anthropic
import openai
from openai import OpenAI

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
MAX_TOKENS = 1000

NO_ABSTRACT_SUMMARY = "No abstract available to summarize."
NO_API_KEY_SUMMARY = "Summary unavailable: no summarization API key configured."
API_ERROR_SUMMARY = "Summary unavailable: the summarization API returned an error."
UNEXPECTED_ERROR_SUMMARY = "Summary unavailable: an unexpected error occurred while summarizing."

SUPPORTED_PROVIDERS: frozenset[str] = frozenset({"openai", "anthropic"})

LOGGER = logging.getLogger(__name__)

SUMMARY_PROMPT = (
    "You summarize scientific abstracts for a weekly literature digest. "
    "Summarize the abstract you are given in plain language in no more than "
    "100 words. Focus on the question addressed, the approach and the main "
    "finding. Reply with the summary only."
)


class SummaryAPIError(RuntimeError):
    """The language-model API answered, but not with a usable completion."""


def summarize(abstract: str, api_key: str | None, provider: str = "openai") -> str:
    """Return a short summary of abstract, or a sentinel string on failure."""
    if not abstract or not abstract.strip():
        return NO_ABSTRACT_SUMMARY
    if not api_key:
        LOGGER.warning("Summarization skipped: no API key configured")
        return NO_API_KEY_SUMMARY

    messages = [
        {"role": "system", "content": SUMMARY_PROMPT},
        {"role": "user", "content": abstract.strip()},
    ]
    try:
        if provider == "anthropic":
            return _summarize_with_claude(messages, api_key)
        return _summarize_with_openai(messages, api_key)
    except (openai.APIStatusError, anthropic.APIStatusError, SummaryAPIError) as exc:
        LOGGER.warning("Summarization API error (provider=%s): %s", provider, exc)
        return API_ERROR_SUMMARY
    except Exception as exc:
        LOGGER.exception("Unexpected summarization failure (provider=%s): %s", provider, exc)
        return UNEXPECTED_ERROR_SUMMARY


def _summarize_with_openai(messages: list[dict[str, str]], api_key: str) -> str:
    client = OpenAI(api_key=api_key)
    response = client.chat.completions.create(
        model=OPENAI_MODEL,
        max_completion_tokens=MAX_TOKENS,
        messages=messages,
    )
    content = response.choices[0].message.content if response.choices else None
    if not content or not content.strip():
        raise SummaryAPIError("OpenAI returned an empty completion")
    return content.strip()


def _summarize_with_claude(messages: list[dict[str, str]], api_key: str) -> str:
    from anthropic_client import claude_chat  # noqa: PLC0415

    content = claude_chat(messages, max_tokens=MAX_TOKENS, api_key=api_key)
    if not content.strip():
        raise SummaryAPIError("Claude returned an empty completion")
    return content.strip()
