"""
Redis-backed stores. Every record is a single JSON value written wholesale.
"""

import json

from loguru import logger

from studymatch.core.constants import (
    ANSWERS_KEY,
    GROUP_PROFILE_KEY,
    PROFILE_KEY,
    QUESTION_INDEX_KEY,
    QUESTION_KEY,
    QUIZ_CONFIG_KEY,
    QUIZ_SEQUENCE_KEY,
)
from studymatch.core.exceptions import InvalidInputError
from studymatch.models.profile import CharacteristicProfile, GroupCharacteristicProfile
from studymatch.models.quiz import QuizAnswer, QuizConfig, QuizQuestion
from studymatch.services.redis_service import RedisService
from studymatch.services.stores.base import GroupProfileStore, ProfileStore, QuestionBank


class RedisProfileStore(ProfileStore):
    """Profiles and write-once answers. Read errors propagate rather than reading as a miss."""

    def __init__(self, redis_service: RedisService) -> None:
        self.redis = redis_service

    async def get_profile(self, user_id: int) -> CharacteristicProfile | None:
        cached = await self.redis.get(self.redis.key(PROFILE_KEY, user_id=user_id), raise_errors=True)
        if not cached:
            return None
        try:
            return CharacteristicProfile.model_validate_json(cached)
        except ValueError as e:
            logger.warning(f"Failed to decode stored profile for user {user_id}: {e}")
            return None

    async def save_profile(self, profile: CharacteristicProfile) -> None:
        key = self.redis.key(PROFILE_KEY, user_id=profile.user_id)
        if not await self.redis.set(key, profile.model_dump_json()):
            raise RuntimeError(f"Failed to persist profile for user {profile.user_id}")

    async def get_answers(self, user_id: int) -> list[QuizAnswer]:
        raw = await self.redis.hgetall(self.redis.key(ANSWERS_KEY, user_id=user_id))
        answers = []
        for question_id, payload in raw.items():
            try:
                answers.append(QuizAnswer.model_validate_json(payload))
            except ValueError as e:
                logger.warning(f"Skipping undecodable answer {question_id} for user {user_id}: {e}")
        return answers

    async def add_answers(self, user_id: int, answers: list[QuizAnswer]) -> None:
        key = self.redis.key(ANSWERS_KEY, user_id=user_id)
        written: list[str] = []
        for answer in answers:
            field = str(answer.question_id)
            if not await self.redis.hsetnx(key, field, answer.model_dump_json()):
                if written:
                    await self.redis.hdel(key, *written)
                raise InvalidInputError(
                    f"Cannot retake question {answer.question_id}. Questions can only be answered once."
                )
            written.append(field)


class RedisGroupProfileStore(GroupProfileStore):
    def __init__(self, redis_service: RedisService) -> None:
        self.redis = redis_service

    async def get(self, group_id: int) -> GroupCharacteristicProfile | None:
        cached = await self.redis.get(self.redis.key(GROUP_PROFILE_KEY, group_id=group_id))
        if not cached:
            return None
        try:
            return GroupCharacteristicProfile.model_validate_json(cached)
        except ValueError as e:
            logger.warning(f"Failed to decode stored profile for group {group_id}: {e}")
            return None

    async def save(self, profile: GroupCharacteristicProfile) -> None:
        key = self.redis.key(GROUP_PROFILE_KEY, group_id=profile.group_id)
        if not await self.redis.set(key, profile.model_dump_json()):
            raise RuntimeError(f"Failed to persist profile for group {profile.group_id}")

    async def delete(self, group_id: int) -> bool:
        return await self.redis.delete(self.redis.key(GROUP_PROFILE_KEY, group_id=group_id))


class RedisQuestionBank(QuestionBank):
    def __init__(self, redis_service: RedisService) -> None:
        self.redis = redis_service

    async def list_questions(self) -> list[QuizQuestion]:
        ids = await self.redis.smembers(self.redis.key(QUESTION_INDEX_KEY))
        questions = []
        for question_id in sorted(int(i) for i in ids):
            question = await self.get_question(question_id)
            if question:
                questions.append(question)
        return questions

    async def get_question(self, question_id: int) -> QuizQuestion | None:
        cached = await self.redis.get(self.redis.key(QUESTION_KEY, question_id=question_id))
        if not cached:
            return None
        try:
            return QuizQuestion.model_validate_json(cached)
        except ValueError as e:
            logger.warning(f"Failed to decode quiz question {question_id}: {e}")
            return None

    async def save_question(self, question: QuizQuestion) -> None:
        key = self.redis.key(QUESTION_KEY, question_id=question.id)
        if not await self.redis.set(key, question.model_dump_json()):
            raise RuntimeError(f"Failed to persist quiz question {question.id}")
        await self.redis.sadd(self.redis.key(QUESTION_INDEX_KEY), str(question.id))

    async def next_id(self) -> int:
        return await self.redis.incr(self.redis.key(QUIZ_SEQUENCE_KEY))

    async def get_config(self) -> QuizConfig:
        cached = await self.redis.get(self.redis.key(QUIZ_CONFIG_KEY))
        if not cached:
            return QuizConfig()
        try:
            return QuizConfig.model_validate(json.loads(cached))
        except ValueError as e:
            logger.warning(f"Failed to decode quiz config, falling back to all questions: {e}")
            return QuizConfig()

    async def save_config(self, config: QuizConfig) -> None:
        if not await self.redis.set(self.redis.key(QUIZ_CONFIG_KEY), config.model_dump_json()):
            raise RuntimeError("Failed to persist quiz configuration")
