"""Prompt management: registry, backends and form-generation templates."""

from __future__ import annotations

from formwright.prompts.registry import configure, get_prompt, reset

__all__ = ["configure", "get_prompt", "reset"]
