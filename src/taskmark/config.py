"""Configuration constants for taskmark."""

import os
from pathlib import Path

# Directory with the project database. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/taskmark").expanduser(),
    Path("~/.taskmark").expanduser(),
    Path("~/.config/taskmark").expanduser(),
]

DATA_DIR_ENV = "TASKMARK_DATA_DIR"

DB_FILENAME = "taskmark.db"

# OpenRouter API key. Environment variables win over files; first file found is used.
API_KEY_ENV_VARS: list[str] = ["TASKMARK_OPENROUTER_API_KEY", "OPENROUTER_API_KEY"]
API_KEY_FILES: list[Path] = [
    Path("~/.config/taskmark-openrouter-key.txt").expanduser(),
    Path("~/.config/secret/taskmark-openrouter-key.txt").expanduser(),
]

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
OPENROUTER_MODEL = "deepseek/deepseek-chat"
OPENROUTER_MAX_TOKENS = 2000
OPENROUTER_TEMPERATURE = 0.7
OPENROUTER_TIMEOUT = 60

# Keys shorter than this are placeholders, not real keys.
MIN_API_KEY_LENGTH = 11

# Palette shared by calendar events and projects. The first entry is the default.
EVENT_COLORS: list[str] = [
    "#3b82f6", "#ef4444", "#10b981", "#f59e0b",
    "#8b5cf6", "#ec4899", "#06b6d4", "#84cc16",
]
PROJECT_COLORS: list[str] = EVENT_COLORS

DEFAULT_PROJECT_NAME = "My Tasks"


def resolve_data_directory() -> Path:
    """Return the data directory.

    ``$TASKMARK_DATA_DIR`` wins; otherwise the first existing entry of
    DATA_DIRECTORIES, falling back to the first entry when none exist yet.
    """
    env_dir = os.environ.get(DATA_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]
