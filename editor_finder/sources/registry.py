"""
Registry of known data origins and their a-priori reliability.

Origins are configuration data: the default table ships in
``editor_finder/data/sources.json`` and can be replaced with the
``SOURCES_PATH`` setting. Nothing mutates the registry at runtime.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from importlib import resources
from pathlib import Path

from editor_finder.constants import UNKNOWN_ORIGIN_RELIABILITY

logger = logging.getLogger(__name__)

DEFAULT_SOURCES_RESOURCE = "sources.json"


class VerificationMethod(Enum):
    """How an origin's data is verified before it reaches us."""

    AUTOMATED_FEED = "automated-feed"
    MANUAL_DIRECTORY = "manual-directory"
    CROSS_REFERENCE = "cross-reference"
    UNVERIFIED_SCRAPE = "unverified-scrape"


@dataclass(frozen=True)
class Origin:
    """A named data origin with a static reliability weight (0-100)."""

    id: str
    name: str
    kind: str
    reliability: int
    verification_method: VerificationMethod


class SourceRegistry:
    """
    Static lookup table of origins.

    Lookups accept either the origin id or its display name. Unknown
    origins get ``unknown_reliability`` (low, not zero) so a legitimately
    new source is not over-penalized.
    """

    def __init__(
        self,
        origins: list[Origin],
        unknown_reliability: int = UNKNOWN_ORIGIN_RELIABILITY,
    ):
        self._by_key: dict[str, Origin] = {}
        for origin in origins:
            if not 0 <= origin.reliability <= 100:
                raise ValueError(
                    f"Origin {origin.id} reliability must be in [0, 100], got {origin.reliability}"
                )
            self._by_key[origin.id] = origin
            self._by_key[origin.name] = origin
        self._origins = tuple(origins)
        self.unknown_reliability = unknown_reliability

    def __contains__(self, key: str) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._origins)

    def get(self, key: str) -> Origin | None:
        return self._by_key.get(key)

    def reliability(self, key: str) -> int:
        origin = self._by_key.get(key)
        return origin.reliability if origin else self.unknown_reliability

    def origins(self) -> tuple[Origin, ...]:
        return self._origins

    def top(self, n: int = 5) -> list[Origin]:
        """Most reliable origins first."""
        return sorted(self._origins, key=lambda o: o.reliability, reverse=True)[:n]

    @classmethod
    def from_dict(cls, data: dict) -> SourceRegistry:
        origins = [
            Origin(
                id=entry["id"],
                name=entry.get("name", entry["id"]),
                kind=entry.get("kind", "unknown"),
                reliability=int(entry["reliability"]),
                verification_method=VerificationMethod(entry["verification_method"]),
            )
            for entry in data["origins"]
        ]
        return cls(origins)


@lru_cache
def load_registry(path: Path | None = None) -> SourceRegistry:
    """
    Load the origin registry.

    Args:
        path: Optional JSON file overriding the packaged default

    Returns:
        SourceRegistry (cached per path)
    """
    if path is not None:
        logger.debug(f"Loading origin registry from {path}")
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    else:
        resource = resources.files("editor_finder.data").joinpath(DEFAULT_SOURCES_RESOURCE)
        data = json.loads(resource.read_text(encoding="utf-8"))
    return SourceRegistry.from_dict(data)
