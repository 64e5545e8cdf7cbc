"""
Content parsing: vocabulary tables and Candidate extraction.
"""

from editor_finder.parsing.content import ContentParser, is_name_shaped
from editor_finder.parsing.vocabulary import Vocabulary, load_vocabulary

__all__ = [
    "ContentParser",
    "Vocabulary",
    "is_name_shaped",
    "load_vocabulary",
]
