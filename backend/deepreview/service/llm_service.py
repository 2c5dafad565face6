"""
llm_service.py

LiteLLM wrappers shared by the analysis job, article chat and Socratic bot:
- single-prompt and multi-turn completion
- rate-limit detection with one retry after the provider's suggested delay
- lenient JSON parsing of model output
"""

from __future__ import annotations

import json
import logging
import math
import re
import time
from typing import Any, Dict, List, Optional

import litellm
from litellm import completion

from ..config import Config

logger = logging.getLogger(__name__)

_RETRY_IN_RE = re.compile(r"retry in\s+([\d.]+)\s*s", re.IGNORECASE)
_FENCE_RE = re.compile(r"```(?:json)?\n?", re.IGNORECASE)


class LLMRateLimitError(Exception):
    """The provider kept rate-limiting us after the allowed retries."""

    def __init__(self, message: str, retry_after_seconds: int):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


# =========================================================
# Rate-limit helpers
# =========================================================

def is_rate_limit_error(exc: BaseException) -> bool:
    if isinstance(exc, (LLMRateLimitError, litellm.RateLimitError)):
        return True
    msg = str(exc).lower()
    return "429" in msg or "quota" in msg or "too many requests" in msg


def extract_retry_seconds(message: str, default: Optional[int] = None) -> int:
    """Seconds suggested by a "... retry in 12.3s" provider message."""
    match = _RETRY_IN_RE.search(message or "")
    if match:
        return int(math.ceil(float(match.group(1))))
    return default if default is not None else Config.socratic.default_retry_seconds


# =========================================================
# Completion calls
# =========================================================

def _content(resp: Any) -> str:
    return (resp.choices[0].message.content or "").strip()


def llm_completion(prompt: str, **overrides: Any) -> str:
    """Single-turn completion."""
    params = Config.llm.to_litellm_params()
    params.update(overrides)
    resp = completion(
        messages=[{"role": "user", "content": prompt}],
        **params,
    )
    return _content(resp)


def llm_chat(messages: List[Dict[str, str]], **overrides: Any) -> str:
    """Multi-turn completion with the chat model settings."""
    params = Config.llm.to_litellm_params(chat=True)
    params.update(overrides)
    resp = completion(messages=messages, **params)
    return _content(resp)


def generate_with_retry(prompt: str, max_retries: Optional[int] = None) -> str:
    """
    llm_completion() with a retry budget for rate-limit errors only.

    Waits for the delay named in the provider message (capped by config)
    before retrying. When the budget is spent raises LLMRateLimitError;
    other errors propagate unchanged.
    """
    if max_retries is None:
        max_retries = Config.socratic.max_retries

    attempt = 0
    while True:
        try:
            return llm_completion(prompt)
        except Exception as exc:
            if not is_rate_limit_error(exc):
                raise
            retry_seconds = extract_retry_seconds(str(exc))
            if attempt >= max_retries:
                raise LLMRateLimitError(str(exc), retry_seconds) from exc

            wait = min(retry_seconds, Config.socratic.max_retry_wait_seconds)
            logger.warning(f"⏳ LLM rate limited, retrying in {wait}s (attempt {attempt + 1}/{max_retries})")
            time.sleep(wait)
            attempt += 1


# =========================================================
# Output parsing
# =========================================================

def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_json_response(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of model output.

    Raises ValueError when the text is not a JSON object.
    """
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        # model wrapped the object in prose
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("No JSON object in model output") from None
        parsed = json.loads(cleaned[start:end + 1])
    if not isinstance(parsed, dict):
        raise ValueError("Model output is not a JSON object")
    return parsed
