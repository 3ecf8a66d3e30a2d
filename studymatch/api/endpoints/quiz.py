from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from studymatch.core.exceptions import InvalidInputError
from studymatch.models.quiz import ProfileResponse, QuestionResponse, QuizSubmission
from studymatch.services.bundle import ServiceBundle, get_bundle

router = APIRouter(prefix="/users/{user_id}", tags=["quiz"])


@router.get("/quiz", response_model=list[QuestionResponse])
async def get_quiz(user_id: int, services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.quiz.get_quiz(user_id)
    except Exception as e:
        logger.exception(f"Failed to load quiz for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load quiz")


@router.post("/quiz/answers", response_model=ProfileResponse)
async def submit_answers(user_id: int, submission: QuizSubmission, services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.quiz.submit_answers(user_id, submission.answers)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to submit quiz for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to submit quiz")


@router.post("/quiz/skip", response_model=ProfileResponse)
async def skip_quiz(user_id: int, services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.quiz.skip_quiz(user_id)
    except Exception as e:
        logger.exception(f"Failed to skip quiz for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to skip quiz")


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(user_id: int, services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.quiz.get_user_profile(user_id)
    except Exception as e:
        logger.exception(f"Failed to load profile for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load profile")
