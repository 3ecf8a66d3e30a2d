from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger

from studymatch.core.exceptions import NotFoundError
from studymatch.models.profile import utcnow
from studymatch.models.quiz import (
    OptionInput,
    QuestionCreate,
    QuestionUpdate,
    QuizConfig,
    QuizOption,
    QuizQuestion,
)
from studymatch.services.stores.base import QuestionBank


def audit(action: str, target_type: str, target_id: int | None, reason: str, **metadata: Any) -> None:
    """Structured audit trail for admin mutations."""
    logger.bind(audit=True, action=action, target_type=target_type, target_id=target_id, **metadata).info(
        f"[AUDIT] {action} {target_type}:{target_id} - {reason}"
    )


class QuizAdminService:
    """Question bank management. Questions are soft-deleted so recorded answers keep resolving."""

    def __init__(self, question_bank: QuestionBank, clock: Callable[[], datetime] = utcnow):
        self.question_bank = question_bank
        self.clock = clock

    async def list_questions(self) -> list[QuizQuestion]:
        questions = await self.question_bank.list_questions()
        return sorted(questions, key=lambda q: (q.order_index, q.id))

    async def get_question(self, question_id: int) -> QuizQuestion:
        question = await self.question_bank.get_question(question_id)
        if question is None:
            raise NotFoundError(f"Question not found: {question_id}")
        return question

    async def _new_option(self, question_id: int, data: OptionInput) -> QuizOption:
        return QuizOption(
            id=await self.question_bank.next_id(),
            question_id=question_id,
            text=data.text,
            order_index=data.order_index,
            role_weights=dict(data.role_weights),
        )

    async def create_question(self, data: QuestionCreate) -> QuizQuestion:
        question_id = await self.question_bank.next_id()
        question = QuizQuestion(id=question_id, text=data.text, order_index=data.order_index, active=True)
        for opt in data.options:
            question.options.append(await self._new_option(question_id, opt))

        await self.question_bank.save_question(question)
        logger.info(f"Created quiz question {question_id} with {len(question.options)} options")
        audit(
            "QUIZ_QUESTION_CREATE",
            "QUIZ_QUESTION",
            question_id,
            f"Created new quiz question: '{data.text}'",
            order_index=data.order_index,
            options_count=len(data.options),
        )
        return question

    async def update_question(self, question_id: int, data: QuestionUpdate) -> QuizQuestion:
        """
        Update text, order and active flag. When options are supplied they are
        matched to existing ones by order index: matches are updated in place,
        new indices create options and indices no longer present are removed.
        """
        question = await self.get_question(question_id)
        old_text = question.text
        old_active = question.active

        question.text = data.text
        question.order_index = data.order_index
        if data.active is not None:
            question.active = data.active

        if data.options:
            existing: dict[int, QuizOption] = {}
            for opt in question.options:
                existing.setdefault(opt.order_index, opt)

            options = []
            for opt_data in data.options:
                current = existing.pop(opt_data.order_index, None)
                if current is not None:
                    current.text = opt_data.text
                    current.role_weights = dict(opt_data.role_weights)
                    options.append(current)
                else:
                    options.append(await self._new_option(question_id, opt_data))
            question.options = options

        await self.question_bank.save_question(question)
        logger.info(f"Updated quiz question {question_id}")
        audit(
            "QUIZ_QUESTION_UPDATE",
            "QUIZ_QUESTION",
            question_id,
            f"Updated question: '{old_text}' -> '{data.text}'",
            old_active=old_active,
            new_active=question.active,
            options_updated=bool(data.options),
        )
        return question

    async def deactivate_question(self, question_id: int) -> None:
        question = await self.get_question(question_id)
        question.active = False
        await self.question_bank.save_question(question)
        logger.info(f"Deactivated quiz question {question_id}")
        audit(
            "QUIZ_QUESTION_DELETE",
            "QUIZ_QUESTION",
            question_id,
            f"Deactivated quiz question: '{question.text}'",
            options_count=len(question.options),
        )

    async def update_option(self, question_id: int, option_id: int, data: OptionInput) -> QuizOption:
        question = await self.get_question(question_id)
        option = question.find_option(option_id)
        if option is None:
            raise NotFoundError(f"Option not found: {option_id}")

        old_text = option.text
        option.text = data.text
        option.order_index = data.order_index
        option.role_weights = dict(data.role_weights)
        await self.question_bank.save_question(question)

        logger.info(f"Updated option {option_id} for question {question_id}")
        audit(
            "QUIZ_OPTION_UPDATE",
            "QUIZ_OPTION",
            option_id,
            f"Updated option for question {question_id}: '{old_text}' -> '{data.text}'",
            question_id=question_id,
        )
        return option

    async def delete_option(self, question_id: int, option_id: int) -> None:
        question = await self.get_question(question_id)
        option = question.find_option(option_id)
        if option is None:
            raise NotFoundError(f"Option not found: {option_id}")

        question.options = [opt for opt in question.options if opt.id != option_id]
        await self.question_bank.save_question(question)

        logger.info(f"Deleted option {option_id} from question {question_id}")
        audit(
            "QUIZ_OPTION_DELETE",
            "QUIZ_OPTION",
            option_id,
            f"Deleted option from question {question_id}: '{option.text}'",
            question_id=question_id,
        )

    async def get_config(self) -> QuizConfig:
        return await self.question_bank.get_config()

    async def update_config(self, selected_question_ids: list[int]) -> QuizConfig:
        """Store the served question subset; unknown and inactive ids are dropped."""
        active_ids = {q.id for q in await self.question_bank.list_active_questions()}
        valid_ids = []
        for qid in selected_question_ids:
            if qid in active_ids and qid not in valid_ids:
                valid_ids.append(qid)

        dropped = len(selected_question_ids) - len(valid_ids)
        if dropped:
            logger.warning(f"Dropped {dropped} unknown, inactive or duplicate question ids from quiz config")

        config = QuizConfig(selected_question_ids=valid_ids, updated_at=self.clock())
        await self.question_bank.save_config(config)

        if valid_ids:
            logger.info(f"Updated quiz config: selected {len(valid_ids)} question IDs")
        else:
            logger.info("Updated quiz config: no questions selected (will show all)")
        audit(
            "QUIZ_CONFIG_UPDATE",
            "QUIZ_CONFIG",
            None,
            f"Updated quiz configuration: {len(valid_ids)} questions selected",
            selected_question_ids=valid_ids,
        )
        return config
