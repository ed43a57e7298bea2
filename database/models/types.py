"""
Shared Column Types

Portable column types used across the job board models. Postgres gets native
arrays; SQLite (used by the test suite) stores the same lists as JSON.
"""

from enum import Enum as PyEnum

from sqlalchemy import JSON, Text, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import ARRAY

# text[] on Postgres, JSON list elsewhere
TextArray = ARRAY(Text).with_variant(JSON(), "sqlite")


def pg_enum(enum_cls: type[PyEnum], name: str) -> SQLEnum:
    """Native enum type that persists member values, not member names."""
    return SQLEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
