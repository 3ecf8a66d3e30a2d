import random
from typing import TypeVar

from loguru import logger

from studymatch.core.constants import FEED_DIVERSITY_SLOTS

T = TypeVar("T")


def interleave_categories(
    categories: dict[str, list[T]],
    rng: random.Random | None = None,
    diversity_slots: int = FEED_DIVERSITY_SLOTS,
) -> list[T]:
    """
    Merge independently sorted categories without letting one dominate.

    Empty categories are dropped and the rest shuffled. The heads of the
    first `diversity_slots` categories come first, then the remainders are
    merged round-robin. Order within a category is preserved.
    """
    rng = rng or random.Random()
    buckets = [(name, list(items)) for name, items in categories.items() if items]
    rng.shuffle(buckets)

    result: list[T] = []
    for name, items in buckets[: min(diversity_slots, len(buckets))]:
        result.append(items.pop(0))
        logger.debug(f"Added diversity item from {name}")

    longest = max((len(items) for _, items in buckets), default=0)
    for i in range(longest):
        for _, items in buckets:
            if i < len(items):
                result.append(items[i])

    logger.debug(f"Interleaved {len(result)} items from {len(buckets)} categories: {[n for n, _ in buckets]}")
    return result
