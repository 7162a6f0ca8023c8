"""Time helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from dateutil import parser


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return parser.parse(value)


def as_naive_local(value: datetime) -> datetime:
    # File timestamps are naive local times; compare like with like.
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
