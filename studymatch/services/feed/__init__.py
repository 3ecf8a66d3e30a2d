from studymatch.services.feed.assembler import FeedAssembler
from studymatch.services.feed.interleave import interleave_categories
from studymatch.services.feed.sources import (
    FeedSource,
    GroupMatchSource,
    RecommendedSessionSource,
    RegisteredSessionSource,
    UpcomingEventSource,
)
from studymatch.services.feed.topics import topic_match_score

__all__ = [
    "FeedAssembler",
    "FeedSource",
    "UpcomingEventSource",
    "GroupMatchSource",
    "RegisteredSessionSource",
    "RecommendedSessionSource",
    "interleave_categories",
    "topic_match_score",
]
