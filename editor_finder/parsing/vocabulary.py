"""
Parser vocabulary loaded from a JSON data table.

Keyword lists and denylists are data, not code: the default table ships in
``editor_finder/data/vocabulary.json`` and can be replaced with the
``VOCABULARY_PATH`` setting without touching parser control flow.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_VOCABULARY_RESOURCE = "vocabulary.json"


@dataclass(frozen=True)
class Vocabulary:
    """Keyword tables used by query building and content parsing."""

    role_noun: str
    role_keywords: tuple[str, ...]
    role_titles: tuple[str, ...]
    confusable_roles: tuple[str, ...]
    categories: dict[str, str]  # keyword -> canonical tag
    tag_hints: tuple[tuple[str, str], ...]  # (keyword, tag), first hit wins
    known_entities: tuple[str, ...]
    placeholder_names: frozenset[str]
    generic_phrases: tuple[str, ...]
    confusable_figures: frozenset[str]

    def category_for(self, text: str) -> str | None:
        """Return the canonical tag if ``text`` is exactly a category keyword."""
        return self.categories.get(text.lower().strip())

    def find_category(self, text: str) -> str | None:
        """Return the first category keyword contained in ``text``."""
        lowered = text.lower()
        for keyword in self.categories:
            if _contains_phrase(lowered, keyword):
                return keyword
        return None

    def is_known_entity(self, text: str) -> bool:
        lowered = text.lower()
        return any(_contains_phrase(lowered, entity) for entity in self.known_entities)

    def guess_tag(self, context: str, default: str) -> str:
        """Guess a specialty tag from query context."""
        lowered = context.lower()
        for keyword, tag in self.tag_hints:
            if keyword in lowered:
                return tag
        return default

    def is_placeholder(self, name: str) -> bool:
        lowered = name.lower().strip()
        return any(p == lowered or p in lowered for p in self.placeholder_names)

    def is_confusable_figure(self, name: str) -> bool:
        lowered = name.lower()
        return any(figure in lowered for figure in self.confusable_figures)

    def has_generic_phrase(self, name: str) -> bool:
        lowered = name.lower()
        return any(_contains_phrase(lowered, phrase) for phrase in self.generic_phrases)

    def has_role_context(self, text: str) -> bool:
        lowered = text.lower()
        return any(keyword in lowered for keyword in self.role_keywords)

    @classmethod
    def from_dict(cls, data: dict) -> Vocabulary:
        return cls(
            role_noun=data["role_noun"],
            role_keywords=tuple(k.lower() for k in data["role_keywords"]),
            role_titles=tuple(data["role_titles"]),
            confusable_roles=tuple(data.get("confusable_roles", [])),
            categories={k.lower(): v for k, v in data["categories"].items()},
            tag_hints=tuple((k.lower(), v) for k, v in data.get("tag_hints", [])),
            known_entities=tuple(e.lower() for e in data.get("known_entities", [])),
            placeholder_names=frozenset(n.lower() for n in data.get("placeholder_names", [])),
            generic_phrases=tuple(p.lower() for p in data.get("generic_phrases", [])),
            confusable_figures=frozenset(n.lower() for n in data.get("confusable_figures", [])),
        )


def _contains_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None


@lru_cache
def load_vocabulary(path: Path | None = None) -> Vocabulary:
    """
    Load the vocabulary table.

    Args:
        path: Optional JSON file overriding the packaged default

    Returns:
        Parsed Vocabulary (cached per path)
    """
    if path is not None:
        logger.debug(f"Loading vocabulary from {path}")
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    else:
        resource = resources.files("editor_finder.data").joinpath(DEFAULT_VOCABULARY_RESOURCE)
        data = json.loads(resource.read_text(encoding="utf-8"))
    return Vocabulary.from_dict(data)
