"""
Extract editor Candidates from unstructured page content.

Role-anchored patterns ("Jane Roe - Editor", "Edited by Jane Roe") find
names first; when none match, names listed under a credits or
post-production heading are tried. Every name must pass the name-shape
check and the vocabulary denylists before it becomes a Candidate.
"""

from __future__ import annotations

import logging
import re

from editor_finder.constants import (
    DEFAULT_TAG,
    DEFAULT_YEARS_ACTIVE,
    DISCOVERY_ORIGIN,
    EARLIEST_CAREER_YEAR,
    MAX_CANDIDATES_PER_BLOCK,
    MAX_CREDIT_FALLBACK_CANDIDATES,
    MAX_NAME_LENGTH,
    MAX_NAME_TOKENS,
    MAX_YEARS_ACTIVE,
    MIN_NAME_TOKENS,
)
from editor_finder.domain.models import Candidate, utcnow
from editor_finder.parsing.vocabulary import Vocabulary, load_vocabulary
from editor_finder.similarity.names import name_key

logger = logging.getLogger(__name__)

NAME = r"([A-Z][\w'.\-]+(?:[ \t]+[A-Z][\w'.\-]+){1,3})"
DASH = r"[ \t]*[-–—][ \t]*"
YEAR_PATTERN = re.compile(r"\b(19\d{2}|20\d{2})\b")
YEAR_WINDOW = 120  # chars either side of a name searched for years
CREDIT_HEADINGS = re.compile(r"(?i)(?:credits?|post[- ]?production)[ \t]*[:\n]")
CREDIT_SECTION_LENGTH = 300

ANCHORED_CONFIDENCE = 0.6
CREDIT_CONFIDENCE = 0.4


def is_name_shaped(name: str) -> bool:
    """Two to four capitalized tokens, no digits, under the length cap."""
    tokens = name.split()
    if not MIN_NAME_TOKENS <= len(tokens) <= MAX_NAME_TOKENS:
        return False
    if len(name) >= MAX_NAME_LENGTH or any(ch.isdigit() for ch in name):
        return False
    return all(token[0].isupper() for token in tokens)


class ContentParser:
    """Heuristic Candidate extractor driven by a Vocabulary data table."""

    def __init__(
        self,
        vocabulary: Vocabulary | None = None,
        max_candidates: int = MAX_CANDIDATES_PER_BLOCK,
        current_year: int | None = None,
    ):
        self.vocabulary = vocabulary or load_vocabulary()
        self.max_candidates = max_candidates
        self.current_year = current_year or utcnow().year

        titles = "|".join(re.escape(t) for t in self.vocabulary.role_titles)
        role = rf"(?i:{titles})"
        self.patterns = [
            re.compile(rf"{NAME}{DASH}{role}\b"),
            re.compile(rf"\b{role}[ \t]*:[ \t]*{NAME}"),
            re.compile(rf"(?i:edited by)[ \t]+{NAME}"),
            re.compile(rf"{NAME}[ \t]*\({role}\)"),
        ]

    def is_denylisted(self, name: str) -> bool:
        """Placeholder, generic phrase or known wrong-role public figure."""
        return (
            self.vocabulary.is_placeholder(name)
            or self.vocabulary.has_generic_phrase(name)
            or self.vocabulary.is_confusable_figure(name)
        )

    def is_valid_name(self, name: str) -> bool:
        return is_name_shaped(name) and not self.is_denylisted(name)

    def estimate_years(self, content: str, start: int, end: int) -> tuple[int, int]:
        """(years_active, start_year) from four-digit years near a name."""
        window = content[max(0, start - YEAR_WINDOW) : end + YEAR_WINDOW]
        years = [
            int(y)
            for y in YEAR_PATTERN.findall(window)
            if EARLIEST_CAREER_YEAR <= int(y) <= self.current_year
        ]
        if not years:
            return DEFAULT_YEARS_ACTIVE, self.current_year - DEFAULT_YEARS_ACTIVE
        years_active = min(max(self.current_year - min(years), 1), MAX_YEARS_ACTIVE)
        return years_active, self.current_year - years_active

    def guess_tag(self, content: str, start: int, end: int, query_context: str) -> str:
        window = content[max(0, start - YEAR_WINDOW) : end + YEAR_WINDOW]
        keyword = self.vocabulary.find_category(window)
        if keyword is not None:
            return self.vocabulary.categories[keyword]
        return self.vocabulary.guess_tag(query_context, DEFAULT_TAG)

    def _anchored_matches(self, content: str):
        for pattern in self.patterns:
            for match in pattern.finditer(content):
                yield match.group(1).strip(), match.start(1), match.end(1), ANCHORED_CONFIDENCE

    def _credit_matches(self, content: str):
        name_pattern = re.compile(NAME)
        for heading in CREDIT_HEADINGS.finditer(content):
            section_start = heading.end()
            section = content[section_start : section_start + CREDIT_SECTION_LENGTH]
            for match in name_pattern.finditer(section):
                yield (
                    match.group(1).strip(),
                    section_start + match.start(1),
                    section_start + match.end(1),
                    CREDIT_CONFIDENCE,
                )

    def parse(
        self,
        content: str,
        origin_url: str,
        query_context: str = "",
        origin_id: str = DISCOVERY_ORIGIN,
    ) -> list[Candidate]:
        """
        Extract Candidates from one content block.

        Args:
            content: Raw page text or markdown
            origin_url: Where the content came from
            query_context: The user's query, used to guess a tag
            origin_id: Registry id of the origin

        Returns:
            At most ``max_candidates`` Candidates, deduplicated by name and year
        """
        if not content or not self.vocabulary.has_role_context(content):
            logger.debug(f"No role context in content from {origin_url}")
            return []

        context = (content, origin_url, query_context, origin_id)
        candidates = self._collect(self._anchored_matches(content), *context, self.max_candidates)
        if not candidates:
            cap = min(MAX_CREDIT_FALLBACK_CANDIDATES, self.max_candidates)
            candidates = self._collect(self._credit_matches(content), *context, cap)
        if not candidates:
            logger.debug(f"Content from {origin_url} produced no valid candidates")
        return candidates

    def _collect(
        self, matches, content: str, origin_url: str, query_context: str, origin_id: str, cap: int
    ) -> list[Candidate]:
        seen: set[tuple[str, int]] = set()
        candidates: list[Candidate] = []
        for name, start, end, confidence in matches:
            name = " ".join(name.split()).rstrip(".,'-")
            if not self.is_valid_name(name):
                logger.debug(f"Rejected candidate name '{name}' from {origin_url}")
                continue
            years_active, start_year = self.estimate_years(content, start, end)
            key = (name_key(name), start_year)
            if key in seen:
                continue
            seen.add(key)
            candidates.append(
                Candidate(
                    name=name,
                    origin_url=origin_url,
                    origin_id=origin_id,
                    tags=(self.guess_tag(content, start, end, query_context),),
                    years_active=years_active,
                    start_year=start_year,
                    confidence_hint=confidence,
                )
            )
            if len(candidates) >= cap:
                break
        return candidates
