"""
Name similarity utilities.

Provides normalization and a length-normalized edit-distance similarity
used by entity resolution and by per-run deduplication.

Two normalized forms exist:
- ``normalize_name`` keeps single spaces as token boundaries and is what
  similarity is computed over
- ``name_key`` strips every non-alphanumeric character and is the identity
  key for exact matches and per-name locking
"""

import re

from rapidfuzz.distance import Levenshtein

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_name(name: str) -> str:
    """
    Lowercase and collapse punctuation/whitespace runs to single spaces.

    Example:
        >>> normalize_name("  O'Neil,  Mary-Jo ")
        'o neil mary jo'
    """
    if not name:
        return ""
    return _NON_ALNUM.sub(" ", name.lower()).strip()


def name_key(name: str) -> str:
    """
    Compact identity key: lowercase alphanumerics only.

    Example:
        >>> name_key("Mary-Jo O'Neil")
        'maryjooneil'
    """
    if not name:
        return ""
    return _NON_ALNUM.sub("", name.lower())


def name_similarity(name1: str, name2: str) -> float:
    """
    Compute length-normalized edit-distance similarity in [0, 1].

    similarity = (max_len - levenshtein_distance) / max_len over the
    normalized names. Identical identity keys always score 1.0, so case and
    punctuation differences never lower the score.

    Args:
        name1: First name
        name2: Second name

    Returns:
        1.0 for identical names, 0.0 when either side is empty
    """
    if name_key(name1) and name_key(name1) == name_key(name2):
        return 1.0

    n1 = normalize_name(name1)
    n2 = normalize_name(name2)
    if not n1 or not n2:
        return 0.0

    max_len = max(len(n1), len(n2))
    distance = Levenshtein.distance(n1, n2)
    return (max_len - distance) / max_len

