import asyncio
import random
from collections.abc import Callable
from datetime import datetime

from loguru import logger

from studymatch.core.config import settings
from studymatch.core.constants import PRIORITY_QUIZ_REMINDER
from studymatch.core.exceptions import InvalidInputError
from studymatch.models.feed import FeedPage, ProfileSummary, QuizReminderItem
from studymatch.models.profile import CharacteristicProfile, QuizStatus, utcnow
from studymatch.services.feed.interleave import interleave_categories
from studymatch.services.feed.sources import FeedSource
from studymatch.services.matching.similarity import to_percentage
from studymatch.services.stores.base import ProfileStore


def quiz_reminder_message(profile: CharacteristicProfile | None) -> str:
    if profile is None or profile.quiz_status == QuizStatus.NOT_STARTED:
        return "Complete the quiz for personalized group matches"
    if profile.quiz_status == QuizStatus.IN_PROGRESS:
        done = to_percentage(profile.reliability_percentage)
        return f"Complete the remaining quiz questions for better matches ({done}% done)"
    if profile.quiz_status == QuizStatus.SKIPPED:
        return "You skipped the quiz. Complete it now for better group recommendations!"
    return "Complete the quiz for better group matching"


class FeedAssembler:
    """
    Builds a user's personalized feed.

    The quiz reminder (when the quiz is not completed) always sits at
    position 0; the category sources are gathered concurrently, interleaved
    for diversity and the result is sliced into pages. A source that fails
    contributes nothing instead of failing the feed.
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        sources: list[FeedSource],
        clock: Callable[[], datetime] = utcnow,
        rng: random.Random | None = None,
        page_size: int | None = None,
    ):
        self.profile_store = profile_store
        self.sources = sources
        self.clock = clock
        self.rng = rng or random.Random()
        self.page_size = page_size or settings.FEED_PAGE_SIZE

    def quiz_reminder(self, profile: CharacteristicProfile | None, now: datetime) -> QuizReminderItem | None:
        if profile is not None and profile.quiz_status == QuizStatus.COMPLETED:
            return None
        return QuizReminderItem(
            priority=PRIORITY_QUIZ_REMINDER,
            timestamp=now,
            quiz_message=quiz_reminder_message(profile),
            quiz_status=profile.quiz_status if profile else QuizStatus.NOT_STARTED,
            reliability_percentage=profile.reliability_percentage if profile else 0.0,
        )

    @staticmethod
    def profile_summary(profile: CharacteristicProfile | None) -> ProfileSummary:
        if profile is None:
            return ProfileSummary(has_profile=False, message="Complete the quiz to get personalized recommendations")
        return ProfileSummary(has_profile=True, message="Profile active - receiving personalized matches")

    async def _collect_safely(self, source: FeedSource, user_id: int, now: datetime) -> list:
        try:
            return await source.collect(user_id, now)
        except Exception as e:
            logger.exception(f"Error collecting {source.name} for user {user_id}: {e}")
            return []

    async def build_feed(self, user_id: int, profile: CharacteristicProfile | None = None) -> list:
        """The full, unpaginated feed for one request."""
        now = self.clock()
        if profile is None:
            profile = await self.profile_store.get_profile(user_id)

        results = await asyncio.gather(*(self._collect_safely(s, user_id, now) for s in self.sources))
        categories = {source.name: items for source, items in zip(self.sources, results)}
        logger.info(
            f"Feed categories for user {user_id}: "
            + ", ".join(f"{name}={len(items)}" for name, items in categories.items())
        )

        items: list = []
        reminder = self.quiz_reminder(profile, now)
        if reminder is not None:
            items.append(reminder)
        items.extend(interleave_categories(categories, self.rng))
        return items

    async def get_feed_page(self, user_id: int, offset: int = 0, page_size: int | None = None) -> FeedPage:
        """
        Items [offset, offset + page_size) of the feed. Pages are slices of
        one list, so the quiz reminder can only appear at offset 0.
        """
        page_size = page_size or self.page_size
        if offset < 0:
            raise InvalidInputError(f"Offset must not be negative: {offset}")
        if page_size <= 0:
            raise InvalidInputError(f"Page size must be positive: {page_size}")

        profile = await self.profile_store.get_profile(user_id)
        feed = await self.build_feed(user_id, profile)
        page = feed[offset : offset + page_size]

        logger.info(f"Returning {len(page)} feed items for user {user_id} (offset={offset}, total={len(feed)})")
        return FeedPage(
            items=page,
            profile_summary=self.profile_summary(profile),
            offset=offset,
            page_size=page_size,
            total_available=len(feed),
        )
