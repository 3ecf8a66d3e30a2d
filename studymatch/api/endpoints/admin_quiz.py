from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger

from studymatch.core.exceptions import InvalidInputError, NotFoundError
from studymatch.models.quiz import (
    OptionInput,
    QuestionCreate,
    QuestionUpdate,
    QuizConfig,
    QuizConfigUpdate,
    QuizOption,
    QuizQuestion,
)
from studymatch.services.bundle import ServiceBundle, get_bundle

router = APIRouter(prefix="/admin/quiz", tags=["admin"])


def _raise_for(action: str, exc: Exception) -> None:
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, InvalidInputError):
        raise HTTPException(status_code=400, detail=str(exc))
    logger.exception(f"Admin quiz action '{action}' failed: {exc}")
    raise HTTPException(status_code=500, detail=f"Failed to {action}")


@router.get("/questions", response_model=list[QuizQuestion])
async def list_questions(services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.quiz_admin.list_questions()
    except Exception as e:
        _raise_for("list questions", e)


@router.get("/questions/{question_id}", response_model=QuizQuestion)
async def get_question(question_id: int, services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.quiz_admin.get_question(question_id)
    except Exception as e:
        _raise_for("load question", e)


@router.post("/questions", response_model=QuizQuestion, status_code=201)
async def create_question(payload: QuestionCreate, services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.quiz_admin.create_question(payload)
    except Exception as e:
        _raise_for("create question", e)


@router.put("/questions/{question_id}", response_model=QuizQuestion)
async def update_question(question_id: int, payload: QuestionUpdate, services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.quiz_admin.update_question(question_id, payload)
    except Exception as e:
        _raise_for("update question", e)


@router.delete("/questions/{question_id}", status_code=204)
async def deactivate_question(question_id: int, services: ServiceBundle = Depends(get_bundle)):
    try:
        await services.quiz_admin.deactivate_question(question_id)
    except Exception as e:
        _raise_for("deactivate question", e)
    return Response(status_code=204)


@router.put("/questions/{question_id}/options/{option_id}", response_model=QuizOption)
async def update_option(
    question_id: int, option_id: int, payload: OptionInput, services: ServiceBundle = Depends(get_bundle)
):
    try:
        return await services.quiz_admin.update_option(question_id, option_id, payload)
    except Exception as e:
        _raise_for("update option", e)


@router.delete("/questions/{question_id}/options/{option_id}", status_code=204)
async def delete_option(question_id: int, option_id: int, services: ServiceBundle = Depends(get_bundle)):
    try:
        await services.quiz_admin.delete_option(question_id, option_id)
    except Exception as e:
        _raise_for("delete option", e)
    return Response(status_code=204)


@router.get("/config", response_model=QuizConfig)
async def get_config(services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.quiz_admin.get_config()
    except Exception as e:
        _raise_for("load quiz config", e)


@router.put("/config", response_model=QuizConfig)
async def update_config(payload: QuizConfigUpdate, services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.quiz_admin.update_config(payload.selected_question_ids)
    except Exception as e:
        _raise_for("update quiz config", e)
