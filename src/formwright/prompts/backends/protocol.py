"""Protocol for pluggable prompt backends."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IPromptBackend(Protocol):
    """Interface for prompt storage backends.

    Implementations are synchronous; prompt resolution happens inline
    while stages assemble their messages.
    """

    def get(self, category: str, name: str) -> str:
        """Return the template ``name`` in ``category``. Raises ``KeyError`` if absent."""
        ...
