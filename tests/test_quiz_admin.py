"""
Tests for question bank administration.
"""

import pytest
from pydantic import ValidationError

from studymatch.core.exceptions import NotFoundError
from studymatch.models.quiz import OptionInput, QuestionCreate, QuestionUpdate
from studymatch.models.roles import RoleType


class TestQuestionManagement:
    """Create, update and deactivate questions."""

    async def test_create_allocates_fresh_ids(self, quiz_admin):
        created = await quiz_admin.create_question(
            QuestionCreate(
                text="How do you prepare for exams?",
                order_index=4,
                options=[
                    OptionInput(text="Make flashcards", order_index=1, role_weights={RoleType.PLANNER: 0.8}),
                    OptionInput(text="Teach a friend", order_index=2, role_weights={RoleType.COMMUNICATOR: 1.0}),
                ],
            )
        )

        # Seeded ids go up to option 32
        assert created.id > 32
        assert len({created.id, *(opt.id for opt in created.options)}) == 3
        assert all(opt.question_id == created.id for opt in created.options)
        assert (await quiz_admin.get_question(created.id)).text == "How do you prepare for exams?"

    async def test_list_includes_inactive_sorted_by_order(self, quiz_admin):
        await quiz_admin.create_question(QuestionCreate(text="First", order_index=0))
        await quiz_admin.deactivate_question(2)

        questions = await quiz_admin.list_questions()

        assert [q.text for q in questions][0] == "First"
        assert len(questions) == 4
        assert not next(q for q in questions if q.id == 2).active

    async def test_get_unknown_question(self, quiz_admin):
        with pytest.raises(NotFoundError):
            await quiz_admin.get_question(404)

    async def test_update_matches_options_by_order_index(self, quiz_admin):
        updated = await quiz_admin.update_question(
            1,
            QuestionUpdate(
                text="Deadline next week",
                order_index=1,
                options=[
                    OptionInput(text="Lead the group", order_index=1, role_weights={RoleType.LEADER: 0.9}),
                    OptionInput(text="Ask for help", order_index=3, role_weights={RoleType.TEAM_PLAYER: 0.6}),
                ],
            ),
        )

        by_order = {opt.order_index: opt for opt in updated.options}
        assert set(by_order) == {1, 3}
        # Existing option kept its id, order index 2 was removed, 3 is new
        assert by_order[1].id == 11
        assert by_order[1].role_weights == {RoleType.LEADER: 0.9}
        assert by_order[3].id not in (11, 12)
        assert updated.text == "Deadline next week"
        assert updated.active

    async def test_update_can_deactivate(self, quiz_admin):
        updated = await quiz_admin.update_question(3, QuestionUpdate(text="x", order_index=3, active=False))

        assert not updated.active
        assert len(updated.options) == 2

    async def test_deactivate_removes_from_active_set(self, quiz_admin, question_bank):
        await quiz_admin.deactivate_question(1)

        active = await question_bank.list_active_questions()

        assert [q.id for q in active] == [2, 3]
        assert await question_bank.get_question(1) is not None


class TestOptionManagement:
    """Single-option edits."""

    async def test_update_option(self, quiz_admin):
        option = await quiz_admin.update_option(
            2, 22, OptionInput(text="Brainstorm", order_index=2, role_weights={RoleType.CREATIVE: 0.7})
        )

        assert option.text == "Brainstorm"
        question = await quiz_admin.get_question(2)
        assert question.find_option(22).role_weights == {RoleType.CREATIVE: 0.7}

    async def test_update_option_of_other_question(self, quiz_admin):
        with pytest.raises(NotFoundError):
            await quiz_admin.update_option(1, 22, OptionInput(text="x"))

    async def test_delete_option(self, quiz_admin):
        await quiz_admin.delete_option(3, 32)

        question = await quiz_admin.get_question(3)
        assert [opt.id for opt in question.options] == [31]

    async def test_delete_unknown_option(self, quiz_admin):
        with pytest.raises(NotFoundError):
            await quiz_admin.delete_option(3, 999)

    def test_negative_weights_rejected(self):
        with pytest.raises(ValidationError):
            OptionInput(text="bad", role_weights={RoleType.LEADER: -0.5})

    def test_weights_above_one_accepted(self):
        option = OptionInput(text="strong", role_weights={RoleType.LEADER: 2.0})

        assert option.role_weights[RoleType.LEADER] == 2.0


class TestQuizConfig:
    """Selected-question configuration."""

    async def test_unknown_and_inactive_ids_dropped(self, quiz_admin):
        await quiz_admin.deactivate_question(2)

        config = await quiz_admin.update_config([3, 2, 99, 1, 3])

        assert config.selected_question_ids == [3, 1]
        assert (await quiz_admin.get_config()).selected_question_ids == [3, 1]

    async def test_empty_selection_means_all(self, quiz_admin, quiz_service):
        await quiz_admin.update_config([2])
        await quiz_admin.update_config([])

        quiz = await quiz_service.get_quiz(1)

        assert [q.question_id for q in quiz] == [1, 2, 3]
