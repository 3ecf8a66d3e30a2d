from collections.abc import Callable
from datetime import datetime

from loguru import logger

from studymatch.core.exceptions import InvalidInputError
from studymatch.models.events import ProfileUpdated
from studymatch.models.profile import CharacteristicProfile, QuizStatus, utcnow
from studymatch.models.quiz import OptionResponse, ProfileResponse, QuestionResponse, QuizAnswer, QuizQuestion
from studymatch.services.events.dispatcher import EventDispatcher
from studymatch.services.matching.similarity import to_percentage
from studymatch.services.quiz.scoring import compute_role_vector
from studymatch.services.stores.base import ProfileStore, QuestionBank


def to_question_response(question: QuizQuestion) -> QuestionResponse:
    return QuestionResponse(
        question_id=question.id,
        question_text=question.text,
        order_index=question.order_index,
        options=[
            OptionResponse(option_id=opt.id, option_text=opt.text, order_index=opt.order_index)
            for opt in question.sorted_options()
        ],
    )


def profile_message(profile: CharacteristicProfile) -> str:
    status = profile.quiz_status
    if status == QuizStatus.COMPLETED:
        return "Profile complete"
    if status == QuizStatus.IN_PROGRESS:
        reliable = to_percentage(profile.reliability_percentage)
        return (
            f"Quiz in progress: {profile.answered_questions}/{profile.total_questions} "
            f"questions answered ({reliable}% reliable)"
        )
    if status == QuizStatus.SKIPPED:
        return "Quiz skipped. Complete it in settings for better matches."
    return "Quiz not started yet"


class QuizService:
    """
    Turns quiz answers into a user's characteristic profile.

    Every successful submit or skip publishes ProfileUpdated so the
    aggregates of the user's groups get recomputed in the background.
    """

    def __init__(
        self,
        question_bank: QuestionBank,
        profile_store: ProfileStore,
        dispatcher: EventDispatcher,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.question_bank = question_bank
        self.profile_store = profile_store
        self.dispatcher = dispatcher
        self.clock = clock

    async def get_quiz(self, user_id: int) -> list[QuestionResponse]:
        """Configured subset of active questions in configured order, or all active questions."""
        active = await self.question_bank.list_active_questions()
        config = await self.question_bank.get_config()

        if config.selected_question_ids:
            by_id = {q.id: q for q in active}
            questions = [by_id[qid] for qid in config.selected_question_ids if qid in by_id]
            logger.info(
                f"User {user_id} - returning {len(questions)} of {len(active)} active quiz questions (configured)"
            )
        else:
            questions = active
            logger.info(f"User {user_id} - returning {len(questions)} active quiz questions")

        return [to_question_response(q) for q in questions]

    async def submit_answers(self, user_id: int, answers: dict[int, int]) -> ProfileResponse:
        """
        Record new answers and recompute the profile from the full answer set.

        The whole submission is rejected if it is empty, re-answers a question,
        or references an unknown question or an option of another question.
        """
        if not answers:
            raise InvalidInputError("Cannot submit empty quiz. Use skip endpoint to skip the quiz.")

        logger.info(f"Processing quiz submission for user {user_id} ({len(answers)} answers)")

        previous = await self.profile_store.get_answers(user_id)
        answered_ids = {a.question_id for a in previous}
        questions = {q.id: q for q in await self.question_bank.list_questions()}

        now = self.clock()
        new_answers = []
        for question_id, option_id in answers.items():
            if question_id in answered_ids:
                raise InvalidInputError(
                    f"Cannot retake question {question_id}. Questions can only be answered once."
                )
            question = questions.get(question_id)
            if question is None or not question.active:
                raise InvalidInputError(f"Invalid question ID: {question_id}")
            if question.find_option(option_id) is None:
                raise InvalidInputError(f"Invalid option ID {option_id} for question {question_id}")
            new_answers.append(QuizAnswer(question_id=question_id, option_id=option_id, answered_at=now))

        await self.profile_store.add_answers(user_id, new_answers)
        all_answers = previous + new_answers

        options = {opt.id: opt for q in questions.values() for opt in q.options}
        selected = []
        for answer in all_answers:
            option = options.get(answer.option_id)
            if option is None:
                logger.warning(
                    f"User {user_id}: option {answer.option_id} for question {answer.question_id} "
                    "no longer exists, skipping"
                )
                continue
            selected.append(option)

        active_questions = [q for q in questions.values() if q.active]
        total = len(active_questions)
        answered = len(all_answers)
        status = QuizStatus.COMPLETED if answered >= total else QuizStatus.IN_PROGRESS

        profile = await self.profile_store.get_profile(user_id) or CharacteristicProfile(
            user_id=user_id, created_at=now
        )
        profile.role_vector = compute_role_vector(selected, active_questions)
        profile.quiz_status = status
        profile.total_questions = total
        profile.answered_questions = answered
        profile.updated_at = now
        profile.update_reliability()
        await self.profile_store.save_profile(profile)

        logger.info(f"Profile saved for user {user_id}. Status: {status.value}, Questions: {answered}/{total}")
        self.dispatcher.publish(ProfileUpdated(user_id=user_id))

        if status == QuizStatus.COMPLETED:
            message = "Your learning profile is complete! We'll use this to find the best group matches for you."
        else:
            done = to_percentage(answered / total) if total else 0
            message = (
                f"Progress saved! You've answered {answered}/{total} questions ({done}%). "
                "Complete the quiz for better matches."
            )

        return ProfileResponse(
            user_id=user_id,
            message=message,
            quiz_status=status,
            reliability_percentage=profile.reliability_percentage,
            requires_onboarding=False,
            dominant_role=profile.dominant_role(),
        )

    async def skip_quiz(self, user_id: int) -> ProfileResponse:
        """Mark the quiz skipped. Role scores already computed are kept."""
        logger.info(f"User {user_id} is skipping the quiz")
        now = self.clock()

        profile = await self.profile_store.get_profile(user_id) or CharacteristicProfile(
            user_id=user_id, created_at=now
        )
        profile.quiz_status = QuizStatus.SKIPPED
        profile.total_questions = 0
        profile.answered_questions = 0
        profile.updated_at = now
        profile.update_reliability()
        await self.profile_store.save_profile(profile)

        self.dispatcher.publish(ProfileUpdated(user_id=user_id))

        return ProfileResponse(
            user_id=user_id,
            message="Quiz skipped. You can take it later from settings to improve group matching.",
            quiz_status=QuizStatus.SKIPPED,
            reliability_percentage=0.0,
            requires_onboarding=False,
        )

    async def get_user_profile(self, user_id: int) -> ProfileResponse:
        profile = await self.profile_store.get_profile(user_id)
        if profile is None:
            return ProfileResponse(
                user_id=user_id,
                message="Please complete the onboarding quiz to help us match you with study groups.",
                quiz_status=QuizStatus.NOT_STARTED,
                reliability_percentage=0.0,
                requires_onboarding=True,
            )

        return ProfileResponse(
            user_id=user_id,
            message=profile_message(profile),
            quiz_status=profile.quiz_status,
            reliability_percentage=profile.reliability_percentage,
            requires_onboarding=profile.requires_onboarding,
            dominant_role=profile.dominant_role(),
        )
