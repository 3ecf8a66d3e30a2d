"""
In-process store implementations.

Records are copied on the way in and out so callers never share mutable
state with the store, matching the behaviour of the Redis backend.
"""

import itertools

from studymatch.core.exceptions import InvalidInputError
from studymatch.models.profile import CharacteristicProfile, GroupCharacteristicProfile
from studymatch.models.quiz import QuizAnswer, QuizConfig, QuizQuestion
from studymatch.services.stores.base import GroupProfileStore, ProfileStore, QuestionBank


class InMemoryProfileStore(ProfileStore):
    def __init__(self) -> None:
        self._profiles: dict[int, CharacteristicProfile] = {}
        self._answers: dict[int, dict[int, QuizAnswer]] = {}

    async def get_profile(self, user_id: int) -> CharacteristicProfile | None:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    async def save_profile(self, profile: CharacteristicProfile) -> None:
        self._profiles[profile.user_id] = profile.model_copy(deep=True)

    async def get_answers(self, user_id: int) -> list[QuizAnswer]:
        return [a.model_copy() for a in self._answers.get(user_id, {}).values()]

    async def add_answers(self, user_id: int, answers: list[QuizAnswer]) -> None:
        recorded = self._answers.setdefault(user_id, {})
        taken = [a.question_id for a in answers if a.question_id in recorded]
        if taken:
            raise InvalidInputError(f"Cannot retake question {taken[0]}. Questions can only be answered once.")
        for answer in answers:
            recorded[answer.question_id] = answer.model_copy()


class InMemoryGroupProfileStore(GroupProfileStore):
    def __init__(self) -> None:
        self._profiles: dict[int, GroupCharacteristicProfile] = {}

    async def get(self, group_id: int) -> GroupCharacteristicProfile | None:
        profile = self._profiles.get(group_id)
        return profile.model_copy(deep=True) if profile else None

    async def save(self, profile: GroupCharacteristicProfile) -> None:
        self._profiles[profile.group_id] = profile.model_copy(deep=True)

    async def delete(self, group_id: int) -> bool:
        return self._profiles.pop(group_id, None) is not None


class InMemoryQuestionBank(QuestionBank):
    def __init__(self, questions: list[QuizQuestion] | None = None) -> None:
        self._questions: dict[int, QuizQuestion] = {}
        self._config = QuizConfig()
        start = 1
        for question in questions or []:
            self._questions[question.id] = question.model_copy(deep=True)
            start = max([start, question.id + 1, *(opt.id + 1 for opt in question.options)])
        self._ids = itertools.count(start)

    async def list_questions(self) -> list[QuizQuestion]:
        return [q.model_copy(deep=True) for q in self._questions.values()]

    async def get_question(self, question_id: int) -> QuizQuestion | None:
        question = self._questions.get(question_id)
        return question.model_copy(deep=True) if question else None

    async def save_question(self, question: QuizQuestion) -> None:
        self._questions[question.id] = question.model_copy(deep=True)

    async def next_id(self) -> int:
        return next(self._ids)

    async def get_config(self) -> QuizConfig:
        return self._config.model_copy(deep=True)

    async def save_config(self, config: QuizConfig) -> None:
        self._config = config.model_copy(deep=True)
