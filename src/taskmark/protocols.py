"""Protocols for dependency injection."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class GeneratorProtocol(Protocol):
    """Protocol for remote text generators."""

    def complete(self, prompt: str, *, system: str) -> str:
        """Return generated text for a prompt, raising RuntimeError on failure."""
        ...
