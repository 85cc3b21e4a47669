"""
Tagged extractor outcome.

A network-bound extractor either produced its record from live data or fell
back to its documented worst-case record. Scorers only ever see ``record``;
the tag exists so orchestrators can log what was degraded.
"""
import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Extraction(Generic[T]):
    record: T
    degraded: bool = False
    error: Optional[str] = None

    @classmethod
    def of(cls, record: T) -> "Extraction[T]":
        return cls(record=record)

    @classmethod
    def failed(cls, fallback: T, error: Exception) -> "Extraction[T]":
        return cls(record=fallback, degraded=True, error=str(error))


def settle(domain: str, url: str, **extractions: Extraction) -> None:
    """Log every degraded extractor of one domain run."""
    for name, outcome in extractions.items():
        if outcome.degraded:
            logger.warning("%s/%s degraded for %s: %s", domain, name, url, outcome.error)
