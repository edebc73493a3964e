"""Tests for OpenRouterApi: HTTP client for task generation."""

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests

from taskmark.api import OpenRouterApi, find_api_key

KEY = "sk-or-test-0123456789"


@pytest.fixture(autouse=True)
def _no_ambient_keys(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Ignore keys from the real environment and home directory."""
    monkeypatch.delenv("TASKMARK_OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.setattr("taskmark.api.API_KEY_FILES", [tmp_path / "missing.txt"])


@pytest.fixture
def api_with_mock_session() -> tuple[OpenRouterApi, MagicMock]:
    """Create an OpenRouterApi with a mocked requests.Session."""
    with patch("taskmark.api.requests.Session") as mock_session_cls:
        mock_session = MagicMock()
        mock_session_cls.return_value = mock_session
        api = OpenRouterApi(api_key=KEY)
    return api, mock_session


def _make_response(data: dict[str, Any], status: int = 200) -> MagicMock:
    """Create a mock HTTP response with given JSON data."""
    response = MagicMock()
    response.ok = status < 400
    response.status_code = status
    response.json.return_value = data
    response.text = str(data)
    return response


def _completion(text: str) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def test_find_api_key_prefers_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    key_file = tmp_path / "key.txt"
    key_file.write_text("file-key-0123456789\n")
    monkeypatch.setattr("taskmark.api.API_KEY_FILES", [key_file])
    monkeypatch.setenv("OPENROUTER_API_KEY", KEY)

    assert find_api_key() == (KEY, "$OPENROUTER_API_KEY")


def test_find_api_key_reads_first_found_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    key_file = tmp_path / "key.txt"
    key_file.write_text("file-key-0123456789\n")
    monkeypatch.setattr("taskmark.api.API_KEY_FILES", [tmp_path / "missing.txt", key_file])

    assert find_api_key() == ("file-key-0123456789", str(key_file))


def test_find_api_key_skips_placeholders(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKMARK_OPENROUTER_API_KEY", "short")
    monkeypatch.setenv("OPENROUTER_API_KEY", "your_openrouter_api_key_here")

    assert find_api_key() == (None, None)


def test_init_raises_without_key() -> None:
    with pytest.raises(RuntimeError, match="no OpenRouter API key found"):
        OpenRouterApi()


def test_complete_sends_prompt_and_key(
    api_with_mock_session: tuple[OpenRouterApi, MagicMock],
) -> None:
    api, mock_session = api_with_mock_session
    mock_session.post.return_value = _make_response(_completion("  # Plan\n- [ ] Step  "))

    result = api.complete("plan a trip", system="rules")

    assert result == "# Plan\n- [ ] Step"
    call_args = mock_session.post.call_args
    payload = call_args.kwargs["json"]
    assert payload["model"] == "deepseek/deepseek-chat"
    assert payload["messages"] == [
        {"role": "system", "content": "rules"},
        {"role": "user", "content": "plan a trip"},
    ]
    assert call_args.kwargs["headers"]["Authorization"] == f"Bearer {KEY}"


@pytest.mark.parametrize(
    ("status", "message"),
    [
        (401, "Invalid API key"),
        (404, "Model not available"),
        (429, "Rate limit exceeded"),
        (503, "temporarily unavailable"),
        (400, "API request failed: 400"),
    ],
)
def test_complete_maps_http_errors(
    api_with_mock_session: tuple[OpenRouterApi, MagicMock], status: int, message: str
) -> None:
    api, mock_session = api_with_mock_session
    mock_session.post.return_value = _make_response({"error": "x"}, status=status)

    with pytest.raises(RuntimeError, match=message):
        api.complete("plan", system="rules")


def test_complete_raises_on_network_error(
    api_with_mock_session: tuple[OpenRouterApi, MagicMock],
) -> None:
    api, mock_session = api_with_mock_session
    mock_session.post.side_effect = requests.ConnectionError("down")

    with pytest.raises(RuntimeError, match="Network error"):
        api.complete("plan", system="rules")


def test_complete_raises_on_empty_reply(
    api_with_mock_session: tuple[OpenRouterApi, MagicMock],
) -> None:
    api, mock_session = api_with_mock_session
    mock_session.post.return_value = _make_response(_completion("   "))

    with pytest.raises(RuntimeError, match="Empty response"):
        api.complete("plan", system="rules")
