"""
Group matching: per-group aggregates of member role vectors and
complementary-vector cosine scoring of students against them.
"""

from studymatch.services.matching.aggregator import GroupProfileAggregator
from studymatch.services.matching.engine import MatchingEngine
from studymatch.services.matching.filters import GroupFilters

__all__ = ["GroupProfileAggregator", "MatchingEngine", "GroupFilters"]
