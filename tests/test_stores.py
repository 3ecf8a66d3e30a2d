"""
Tests for the Redis-backed stores against a mocked client.
"""

from unittest.mock import AsyncMock

import pytest
import redis.asyncio as redis
from conftest import NOW, build_questions, role_vector

from studymatch.core.exceptions import InvalidInputError
from studymatch.models.profile import CharacteristicProfile, GroupCharacteristicProfile, QuizStatus
from studymatch.models.quiz import QuizAnswer
from studymatch.services.quiz.service import QuizService
from studymatch.services.redis_service import RedisService
from studymatch.services.stores.redis_store import RedisGroupProfileStore, RedisProfileStore, RedisQuestionBank


@pytest.fixture
def client():
    return AsyncMock()


@pytest.fixture
def redis_service(client):
    service = RedisService(url="redis://localhost:6379/0", key_prefix="test:")
    service._client = client
    return service


class TestRedisService:
    async def test_keys_are_prefixed(self, redis_service):
        assert redis_service.key("profile:{user_id}", user_id=3) == "test:profile:3"

    async def test_errors_are_logged_not_raised(self, redis_service, client):
        client.get.side_effect = redis.ConnectionError("down")
        client.set.side_effect = redis.ConnectionError("down")

        assert await redis_service.get("k") is None
        assert await redis_service.set("k", "v") is False

    async def test_id_allocation_errors_propagate(self, redis_service, client):
        client.incr.side_effect = redis.ConnectionError("down")

        with pytest.raises(redis.ConnectionError):
            await redis_service.incr("seq")

    async def test_smembers_returns_builtin_set(self, redis_service, client):
        client.smembers.return_value = ["1", "2", "2"]

        assert await redis_service.smembers("ids") == {"1", "2"}

    async def test_strict_get_raises(self, redis_service, client):
        client.get.side_effect = redis.ConnectionError("down")

        with pytest.raises(redis.ConnectionError):
            await redis_service.get("k", raise_errors=True)


class TestRedisProfileStore:
    async def test_save_and_load_profile(self, redis_service, client):
        store = RedisProfileStore(redis_service)
        profile = CharacteristicProfile(
            user_id=1,
            role_vector=role_vector(0.1, leader=0.9),
            quiz_status=QuizStatus.COMPLETED,
            created_at=NOW,
            updated_at=NOW,
        )

        await store.save_profile(profile)
        key, payload = client.set.await_args.args
        client.get.return_value = payload

        assert key == "test:profile:1"
        assert await store.get_profile(1) == profile

    async def test_failed_write_raises(self, redis_service, client):
        client.set.return_value = None
        store = RedisProfileStore(redis_service)

        with pytest.raises(RuntimeError):
            await store.save_profile(CharacteristicProfile(user_id=1))

    async def test_undecodable_profile_is_missing(self, redis_service, client):
        client.get.return_value = "{not json"

        assert await RedisProfileStore(redis_service).get_profile(1) is None

    async def test_answers_skip_corrupt_entries(self, redis_service, client):
        good = QuizAnswer(question_id=1, option_id=11, answered_at=NOW)
        client.hgetall.return_value = {"1": good.model_dump_json(), "2": "garbage"}

        assert await RedisProfileStore(redis_service).get_answers(1) == [good]


class TestRedisGroupProfileStore:
    async def test_delete_reports_whether_removed(self, redis_service, client):
        store = RedisGroupProfileStore(redis_service)
        client.delete.return_value = 1

        assert await store.delete(4) is True
        client.delete.assert_awaited_with("test:group_profile:4")

    async def test_missing_group_profile(self, redis_service, client):
        client.get.return_value = None

        assert await RedisGroupProfileStore(redis_service).get(4) is None

    async def test_round_trip(self, redis_service, client):
        store = RedisGroupProfileStore(redis_service)
        profile = GroupCharacteristicProfile(
            group_id=4, average_role_vector=role_vector(0.2), member_count=2, last_updated_at=NOW
        )

        await store.save(profile)
        client.get.return_value = client.set.await_args.args[1]

        assert await store.get(4) == profile


class TestRedisQuestionBank:
    async def test_list_questions_reads_index(self, redis_service, client):
        questions = {f"test:quiz:question:{q.id}": q.model_dump_json() for q in build_questions()}
        client.smembers.return_value = {"3", "1", "2"}
        client.get.side_effect = lambda key: questions.get(key)

        listed = await RedisQuestionBank(redis_service).list_questions()

        assert [q.id for q in listed] == [1, 2, 3]

    async def test_save_question_updates_index(self, redis_service, client):
        question = build_questions()[0]

        await RedisQuestionBank(redis_service).save_question(question)

        client.sadd.assert_awaited_with("test:quiz:questions", "1")

    async def test_missing_config_means_all_questions(self, redis_service, client):
        client.get.return_value = None

        config = await RedisQuestionBank(redis_service).get_config()

        assert config.selected_question_ids == []

    async def test_next_id(self, redis_service, client):
        client.incr.return_value = 41

        assert await RedisQuestionBank(redis_service).next_id() == 41
        client.incr.assert_awaited_with("test:quiz:sequence")


class TestRedisAnswerIntegrity:
    """Quiz answers stay write-once even when Redis misbehaves."""

    async def test_read_errors_propagate(self, redis_service, client):
        store = RedisProfileStore(redis_service)
        client.hgetall.side_effect = redis.ConnectionError("blip")
        client.get.side_effect = redis.ConnectionError("blip")

        with pytest.raises(redis.ConnectionError):
            await store.get_answers(1)
        with pytest.raises(redis.ConnectionError):
            await store.get_profile(1)

    async def test_existing_answer_rejects_whole_batch(self, redis_service, client):
        client.hsetnx.side_effect = [True, False]
        answers = [
            QuizAnswer(question_id=2, option_id=21, answered_at=NOW),
            QuizAnswer(question_id=1, option_id=12, answered_at=NOW),
        ]

        with pytest.raises(InvalidInputError, match="Cannot retake question 1"):
            await RedisProfileStore(redis_service).add_answers(1, answers)

        client.hdel.assert_awaited_once_with("test:answers:1", "2")

    async def test_unreadable_answers_fail_submission(self, redis_service, client, question_bank, dispatcher, clock):
        client.get.return_value = None
        client.hgetall.side_effect = redis.ConnectionError("blip")
        service = QuizService(question_bank, RedisProfileStore(redis_service), dispatcher, clock=clock)

        with pytest.raises(redis.ConnectionError):
            await service.submit_answers(1, {1: 12})

        client.hsetnx.assert_not_awaited()
        client.set.assert_not_awaited()

    async def test_concurrent_retake_rejected(self, redis_service, client, question_bank, dispatcher, clock):
        # The earlier answer is not visible in the read, but the write still refuses it
        client.get.return_value = None
        client.hgetall.return_value = {}
        client.hsetnx.return_value = False
        service = QuizService(question_bank, RedisProfileStore(redis_service), dispatcher, clock=clock)

        with pytest.raises(InvalidInputError):
            await service.submit_answers(1, {1: 12})

        client.set.assert_not_awaited()
