"""Field type registry."""

from __future__ import annotations

from formwright.registry.field_types import (
    FieldTypeDescriptor,
    FieldTypeRegistry,
    default_registry,
)

__all__ = ["FieldTypeDescriptor", "FieldTypeRegistry", "default_registry"]
