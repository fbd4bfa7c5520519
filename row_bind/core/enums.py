"""Enumerations shared across the mapping and execution layers."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


class PopulationCondition(Enum):
    """Conditions a field must meet when populating an entity from a record."""

    OPTIONAL = "optional"  # field may be absent
    REQUIRED = "required"  # field must be present
    NOT_NULL = "not_null"  # field must be present and non-null


class IgnoreBehavior(Enum):
    """When an ignored property is skipped.

    BOTH skips it on load and on save, ON_LOAD only when populating
    entities, ON_SAVE only when exposing entities as rows.
    """

    BOTH = "both"
    ON_LOAD = "on_load"
    ON_SAVE = "on_save"
