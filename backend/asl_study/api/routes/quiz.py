"""Test-mode quiz API routes."""

import logging

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from asl_study.api.dependencies import QuizManagerDep
from asl_study.api.schemas import CardResponse, ErrorResponse
from asl_study.domain.constants import FeedbackMessages
from asl_study.domain.services.quiz_manager import (
    CardLoadError,
    QuizExpiredError,
    QuizNotFoundError,
)
from asl_study.domain.services.quiz_session import (
    EmptyAnswerError,
    InvalidTransitionError,
    QuizRound,
    QuizSession,
)
from asl_study.domain.value_objects.card_selection import SelectionKind, selection_from

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


# =============================================================================
# Request/Response Models
# =============================================================================


class StartQuizRequest(BaseModel):
    """Request body for starting a quiz."""

    user_id: str = Field(..., min_length=1)
    selection: SelectionKind = SelectionKind.ALL
    deck_id: str | None = None
    shuffle: bool = True


class AnswerRequest(BaseModel):
    """Request body for submitting an answer."""

    answer: str


class MissedRoundResponse(BaseModel):
    """Incorrectly answered card for the review screen."""

    card: CardResponse
    user_answer: str


class QuizSummaryResponse(BaseModel):
    """Final results of a quiz."""

    total_cards: int
    answered: int
    correct_count: int
    incorrect_count: int
    score_percent: int
    incorrect: list[MissedRoundResponse]


class QuizResponse(BaseModel):
    """Current state of a quiz."""

    quiz_id: str
    state: str
    selection: str
    deck_id: str | None
    total_cards: int
    current_index: int
    remaining_count: int
    current_card: CardResponse | None
    correct_count: int
    message: str | None = None
    summary: QuizSummaryResponse | None = None


class AnswerResponse(BaseModel):
    """Feedback for a submitted answer."""

    is_correct: bool
    feedback: str
    correct_answer: str
    matched_answer: str | None
    quiz: QuizResponse


# =============================================================================
# Helpers
# =============================================================================


def _to_response(session: QuizSession) -> QuizResponse:
    current = session.get_current_card()
    summary = None
    if session.state.is_terminal() and session.total_cards:
        data = session.summary()
        summary = QuizSummaryResponse(
            total_cards=data["total_cards"],
            answered=data["answered"],
            correct_count=data["correct_count"],
            incorrect_count=data["incorrect_count"],
            score_percent=data["score_percent"],
            incorrect=[
                MissedRoundResponse(card=CardResponse(**r["card"]), user_answer=r["user_answer"])
                for r in data["incorrect"]
            ],
        )
    return QuizResponse(
        quiz_id=session.id,
        state=session.state.value,
        selection=session.kind.value,
        deck_id=session.deck_id,
        total_cards=session.total_cards,
        current_index=session.current_index,
        remaining_count=session.get_remaining_count(),
        current_card=CardResponse.from_card(current) if current else None,
        correct_count=session.correct_count,
        message=session.message,
        summary=summary,
    )


def _answer_response(session: QuizSession, quiz_round: QuizRound) -> AnswerResponse:
    return AnswerResponse(
        is_correct=quiz_round.is_correct,
        feedback=FeedbackMessages.for_answer(quiz_round.is_correct),
        correct_answer=quiz_round.card.answer,
        matched_answer=quiz_round.result.matched_answer,
        quiz=_to_response(session),
    )


def _unavailable(error: QuizNotFoundError | QuizExpiredError) -> HTTPException:
    if isinstance(error, QuizExpiredError):
        return HTTPException(status_code=status.HTTP_410_GONE, detail={"error": str(error)})
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"error": str(error)})


def _conflict(error: InvalidTransitionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail={"error": str(error)})


_QUIZ_ERRORS = {
    404: {"model": ErrorResponse, "description": "Quiz not found"},
    410: {"model": ErrorResponse, "description": "Quiz expired"},
}


# =============================================================================
# Routes
# =============================================================================


@router.post(
    "/start",
    response_model=QuizResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid selection"},
        500: {"model": ErrorResponse, "description": "Cards could not be loaded"},
        504: {"model": ErrorResponse, "description": "Card loading timed out"},
    },
)
async def start_quiz(request: StartQuizRequest, quiz_manager: QuizManagerDep) -> QuizResponse:
    """Start a test-mode quiz.

    Loads the user's starred set, then the cards of the selection. A
    selection without cards still creates a quiz, in the NO_CARDS state.
    """
    try:
        selection = selection_from(request.selection, request.deck_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": str(e)},
        ) from None

    try:
        session = await quiz_manager.start_quiz(
            request.user_id,
            selection,
            shuffle=request.shuffle,
        )
    except CardLoadError as e:
        code = (
            status.HTTP_504_GATEWAY_TIMEOUT
            if e.timed_out
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        raise HTTPException(status_code=code, detail={"error": str(e)}) from None

    return _to_response(session)


@router.get("/{quiz_id}", response_model=QuizResponse, responses=_QUIZ_ERRORS)
async def get_quiz(quiz_id: str, quiz_manager: QuizManagerDep) -> QuizResponse:
    """Get the current state of a quiz."""
    try:
        session = quiz_manager.get_quiz(quiz_id)
    except (QuizNotFoundError, QuizExpiredError) as e:
        raise _unavailable(e) from None
    return _to_response(session)


@router.post(
    "/{quiz_id}/answer",
    response_model=AnswerResponse,
    responses={
        **_QUIZ_ERRORS,
        400: {"model": ErrorResponse, "description": "Empty answer"},
        409: {"model": ErrorResponse, "description": "Not waiting for an answer"},
    },
)
async def submit_answer(
    quiz_id: str,
    request: AnswerRequest,
    quiz_manager: QuizManagerDep,
) -> AnswerResponse:
    """Score an answer for the current card.

    A wrong answer stars the card unless the quiz draws from starred cards.
    """
    try:
        outcome = await quiz_manager.submit_answer(quiz_id, request.answer)
    except (QuizNotFoundError, QuizExpiredError) as e:
        raise _unavailable(e) from None
    except EmptyAnswerError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": str(e)},
        ) from None
    except InvalidTransitionError as e:
        raise _conflict(e) from None

    return _answer_response(outcome.session, outcome.round)


@router.post(
    "/{quiz_id}/advance",
    response_model=QuizResponse,
    responses={
        **_QUIZ_ERRORS,
        409: {"model": ErrorResponse, "description": "No answer submitted yet"},
    },
)
async def advance_quiz(quiz_id: str, quiz_manager: QuizManagerDep) -> QuizResponse:
    """Move to the next card, or complete the quiz after the last one."""
    try:
        session, _ = quiz_manager.advance(quiz_id)
    except (QuizNotFoundError, QuizExpiredError) as e:
        raise _unavailable(e) from None
    except InvalidTransitionError as e:
        raise _conflict(e) from None
    return _to_response(session)


@router.post("/{quiz_id}/restart", response_model=QuizResponse, responses=_QUIZ_ERRORS)
async def restart_quiz(quiz_id: str, quiz_manager: QuizManagerDep) -> QuizResponse:
    """Start the quiz over with the same card order."""
    try:
        session = quiz_manager.restart(quiz_id)
    except (QuizNotFoundError, QuizExpiredError) as e:
        raise _unavailable(e) from None
    return _to_response(session)


@router.delete(
    "/{quiz_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "Quiz not found"}},
)
async def cancel_quiz(quiz_id: str, quiz_manager: QuizManagerDep) -> Response:
    """Cancel a quiz and discard its results."""
    try:
        quiz_manager.cancel(quiz_id)
    except QuizNotFoundError as e:
        raise _unavailable(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
