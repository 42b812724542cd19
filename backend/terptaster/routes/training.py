"""
TerpTaster Backend - Terp Training Routes
=========================================

What:  The terp training game over HTTP.
How:   Stateless: a question carries a profile_id, and the client sends it
       back with its guess (plus current streak and strikes) or hint request.
"""

from fastapi import APIRouter, Depends, Query

from terptaster.schemas.common import ErrorResponse
from terptaster.schemas.training import (
    GuessRequest,
    GuessResult,
    HintResponse,
    TrainingMode,
    TrainingQuestion,
)
from terptaster.services.training import TrainingService, get_training_service

router = APIRouter(prefix="/api/training", tags=["Training"])


@router.get("/question", response_model=TrainingQuestion, summary="Deal a new question")
async def new_question(
    mode: TrainingMode = Query(default=TrainingMode.MULTIPLE_CHOICE),
    service: TrainingService = Depends(get_training_service),
) -> TrainingQuestion:
    return service.new_question(mode)


@router.post(
    "/guess",
    response_model=GuessResult,
    responses={404: {"description": "Unknown profile", "model": ErrorResponse}},
    summary="Check a guess",
)
async def check_guess(
    body: GuessRequest,
    service: TrainingService = Depends(get_training_service),
) -> GuessResult:
    return service.check_guess(body.profile_id, body.guess, body.streak, body.strikes)


@router.get(
    "/hint",
    response_model=HintResponse,
    responses={
        400: {"description": "Hint index out of range", "model": ErrorResponse},
        404: {"description": "Unknown profile", "model": ErrorResponse},
    },
    summary="Reveal one hint",
)
async def get_hint(
    profile_id: int = Query(ge=0),
    index: int = Query(default=0),
    service: TrainingService = Depends(get_training_service),
) -> HintResponse:
    return service.hint(profile_id, index)
