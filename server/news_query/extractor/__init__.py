"""
Entity Extractor

Collects tokens of one category from a compiled tree under a per-category
descent policy, plus the info entity selector built on top of it.

Re-exports:
    - EntityExtractor: Depth-first category extraction
    - InfoEntitySelector: Organisation/language selection for info requests
    - DESCENT_POLICY, Descent: Per-category traversal rules
"""
from .extractor import EntityExtractor
from .policy import DESCENT_POLICY, Descent
from .selector import InfoEntitySelector

__all__ = [
    "DESCENT_POLICY",
    "Descent",
    "EntityExtractor",
    "InfoEntitySelector",
]
