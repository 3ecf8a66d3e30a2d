from abc import ABC, abstractmethod

from studymatch.models.profile import CharacteristicProfile, GroupCharacteristicProfile
from studymatch.models.quiz import QuizAnswer, QuizConfig, QuizQuestion


class ProfileStore(ABC):
    """Per-user characteristic profiles and the quiz answers they were computed from."""

    @abstractmethod
    async def get_profile(self, user_id: int) -> CharacteristicProfile | None:
        pass

    @abstractmethod
    async def save_profile(self, profile: CharacteristicProfile) -> None:
        pass

    @abstractmethod
    async def get_answers(self, user_id: int) -> list[QuizAnswer]:
        pass

    @abstractmethod
    async def add_answers(self, user_id: int, answers: list[QuizAnswer]) -> None:
        """
        Record answers atomically per question. Raises InvalidInputError,
        recording nothing from the batch, if any question already has one.
        """


class GroupProfileStore(ABC):
    """Materialized group aggregates keyed by group id; writes replace the record."""

    @abstractmethod
    async def get(self, group_id: int) -> GroupCharacteristicProfile | None:
        pass

    @abstractmethod
    async def save(self, profile: GroupCharacteristicProfile) -> None:
        pass

    @abstractmethod
    async def delete(self, group_id: int) -> bool:
        pass


class QuestionBank(ABC):
    """Quiz questions with their weighted options, plus the served-subset configuration."""

    @abstractmethod
    async def list_questions(self) -> list[QuizQuestion]:
        """All questions, active or not."""

    @abstractmethod
    async def get_question(self, question_id: int) -> QuizQuestion | None:
        pass

    @abstractmethod
    async def save_question(self, question: QuizQuestion) -> None:
        pass

    @abstractmethod
    async def next_id(self) -> int:
        """Allocate an id for a new question or option."""

    @abstractmethod
    async def get_config(self) -> QuizConfig:
        pass

    @abstractmethod
    async def save_config(self, config: QuizConfig) -> None:
        pass

    async def list_active_questions(self) -> list[QuizQuestion]:
        questions = [q for q in await self.list_questions() if q.active]
        return sorted(questions, key=lambda q: (q.order_index, q.id))
