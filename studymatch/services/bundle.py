import random
from collections.abc import Callable
from datetime import datetime

from loguru import logger

from studymatch.core.config import settings
from studymatch.models.profile import utcnow
from studymatch.models.quiz import QuizQuestion
from studymatch.services.directory.memory import (
    InMemoryEventDirectory,
    InMemoryMembershipDirectory,
    InMemorySessionDirectory,
    InMemoryTopicDirectory,
)
from studymatch.services.events.dispatcher import EventDispatcher
from studymatch.services.events.listener import GroupProfileEventListener
from studymatch.services.feed import (
    FeedAssembler,
    GroupMatchSource,
    RecommendedSessionSource,
    RegisteredSessionSource,
    UpcomingEventSource,
)
from studymatch.services.matching import GroupProfileAggregator, MatchingEngine
from studymatch.services.quiz import QuizAdminService, QuizService
from studymatch.services.redis_service import RedisService
from studymatch.services.stores.memory import InMemoryGroupProfileStore, InMemoryProfileStore, InMemoryQuestionBank
from studymatch.services.stores.redis_store import RedisGroupProfileStore, RedisProfileStore, RedisQuestionBank


class ServiceBundle:
    """
    Wires stores, collaborator directories and services together.
    Provides one object the API layer resolves everything from.
    """

    def __init__(
        self,
        backend: str | None = None,
        questions: list[QuizQuestion] | None = None,
        clock: Callable[[], datetime] = utcnow,
        rng: random.Random | None = None,
    ):
        backend = backend or settings.STORE_BACKEND
        self.redis: RedisService | None = None

        if backend == "redis":
            self.redis = RedisService()
            self.profile_store = RedisProfileStore(self.redis)
            self.group_store = RedisGroupProfileStore(self.redis)
            self.question_bank = RedisQuestionBank(self.redis)
        else:
            self.profile_store = InMemoryProfileStore()
            self.group_store = InMemoryGroupProfileStore()
            self.question_bank = InMemoryQuestionBank(questions)
        logger.debug(f"Using {backend} store backend")

        self.membership = InMemoryMembershipDirectory()
        self.events = InMemoryEventDirectory(self.membership)
        self.sessions = InMemorySessionDirectory()
        self.topics = InMemoryTopicDirectory()

        self.dispatcher = EventDispatcher()
        self.aggregator = GroupProfileAggregator(self.group_store, self.profile_store, self.membership, clock=clock)
        GroupProfileEventListener(self.aggregator).register(self.dispatcher)

        self.quiz = QuizService(self.question_bank, self.profile_store, self.dispatcher, clock=clock)
        self.quiz_admin = QuizAdminService(self.question_bank, clock=clock)
        self.matching = MatchingEngine(self.profile_store, self.group_store, self.membership)
        self.feed = FeedAssembler(
            self.profile_store,
            sources=[
                UpcomingEventSource(self.events),
                GroupMatchSource(self.matching),
                RegisteredSessionSource(self.sessions),
                RecommendedSessionSource(self.sessions, self.membership, self.topics),
            ],
            clock=clock,
            rng=rng,
        )

    def ingest(self, event) -> None:
        """Mirror a membership event locally, then queue it for background recomputation."""
        self.membership.apply(event)
        self.dispatcher.publish(event)

    def start(self) -> None:
        self.dispatcher.start()

    async def close(self) -> None:
        """Finish pending background work and release connections."""
        await self.dispatcher.stop()
        if self.redis is not None:
            await self.redis.close()


bundle = ServiceBundle()


def get_bundle() -> ServiceBundle:
    return bundle
