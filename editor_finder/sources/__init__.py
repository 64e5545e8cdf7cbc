"""
Data origins: the reliability registry and the TMDb feed client.
"""

from editor_finder.sources.registry import (
    Origin,
    SourceRegistry,
    VerificationMethod,
    load_registry,
)

__all__ = [
    "Origin",
    "SourceRegistry",
    "VerificationMethod",
    "load_registry",
]
