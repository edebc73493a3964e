"""OpenRouter chat-completions client used for task generation."""

import logging
import os

import requests

from taskmark.config import (
    API_KEY_ENV_VARS,
    API_KEY_FILES,
    MIN_API_KEY_LENGTH,
    OPENROUTER_MAX_TOKENS,
    OPENROUTER_MODEL,
    OPENROUTER_TEMPERATURE,
    OPENROUTER_TIMEOUT,
    OPENROUTER_URL,
)

_PLACEHOLDER_KEYS = {"your_openrouter_api_key_here"}


def _usable(key: str | None) -> bool:
    return bool(key) and len(key) >= MIN_API_KEY_LENGTH and key not in _PLACEHOLDER_KEYS


def find_api_key() -> tuple[str | None, str | None]:
    """Return (key, source) from the environment or key files, or (None, None)."""
    for var in API_KEY_ENV_VARS:
        key = os.environ.get(var, "").strip()
        if _usable(key):
            return key, f"${var}"
    for key_path in API_KEY_FILES:
        try:
            key = key_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            continue
        if _usable(key):
            return key, str(key_path)
    return None, None


def _status_error(status: int, body: str) -> str:
    if status == 401:
        return "Invalid API key. Please check your OpenRouter API key configuration."
    if status == 404:
        return "Model not available. Please try again or contact support."
    if status == 429:
        return "Rate limit exceeded. Please try again in a few minutes."
    if status >= 500:
        return "OpenRouter service is temporarily unavailable. Please try again later."
    return f"API request failed: {status} - {body}"


class OpenRouterApi:
    """Minimal OpenRouter client returning the first completion's text."""

    def __init__(self, *, api_key: str | None = None, model: str = OPENROUTER_MODEL) -> None:
        self.sess = requests.Session()
        self.logger = logging.getLogger("api")
        self.model = model

        source = "argument"
        if api_key is None:
            api_key, source = find_api_key()
        if not _usable(api_key):
            msg = (
                "AI task generation is not available: no OpenRouter API key found "
                f"in {API_KEY_ENV_VARS!r} or {[str(p) for p in API_KEY_FILES]!r}"
            )
            raise RuntimeError(msg)
        self.api_key = api_key

        self.logger.debug(f"API ready: key from {source!r}, model {self.model!r}")

    def complete(self, prompt: str, *, system: str) -> str:
        """Send one chat completion and return the stripped reply text."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": OPENROUTER_MAX_TOKENS,
            "temperature": OPENROUTER_TEMPERATURE,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "X-Title": "taskmark - AI Task Generator",
        }

        self.logger.debug(f"Making request: {self.model!r} {prompt[:32]!r}")
        try:
            r = self.sess.post(
                OPENROUTER_URL, json=payload, headers=headers, timeout=OPENROUTER_TIMEOUT
            )
        except requests.RequestException as e:
            msg = "Network error. Please check your internet connection and try again."
            raise RuntimeError(msg) from e

        if not r.ok:
            self.logger.warning(f"OpenRouter API error: {r.status_code} {r.text[:200]!r}")
            raise RuntimeError(_status_error(r.status_code, r.text))

        data = r.json()
        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or ""
        if not content.strip():
            msg = "Empty response from AI service"
            raise RuntimeError(msg)
        return content.strip()
