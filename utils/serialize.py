"""
Response helpers for the routers: ISO timestamps and camelCase keys.
"""
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic.alias_generators import to_camel


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def camel_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Top-level keys only; nested mappings keyed by data (requirement names) are left alone."""
    return {to_camel(k): v for k, v in data.items()}
