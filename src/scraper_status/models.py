"""Data models for per-country processing state."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ProcessStatus(str, Enum):
    """Stored processing states of a country crawl."""
    INITIATE = "Initiate"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"


# Values returned by get_state when no stored status is available
STATE_UNKNOWN = "unknown"
STATE_ERROR = "error"


@dataclass
class CountryKey:
    """A country being crawled and its slug (empty when unresolvable)."""
    country: str
    slug: str


@dataclass
class ProcessingState:
    """Stored processing state for one country."""
    country: str
    status: str
    last_updated: datetime
    proxy_call_count: Optional[int]
