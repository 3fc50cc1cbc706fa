from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from ...core.validation import InvalidSubscriptionError
from ...schemas import ConflictResponse, MessageResponse, SubscribeRequest, SubscribeResponse
from ...services.subscribers import SubscribeOutcome, SubscriberStore
from ..deps import get_subscriber_store

router = APIRouter()

ALREADY_REGISTERED = "already registered"


@router.post(
    "/subscribe",
    response_model=SubscribeResponse,
    responses={
        400: {"model": MessageResponse},
        409: {"model": ConflictResponse},
        500: {"model": MessageResponse},
    },
)
def subscribe(
    payload: SubscribeRequest,
    store: SubscriberStore = Depends(get_subscriber_store),
) -> Any:
    """Store a newsletter email once."""
    try:
        outcome = store.subscribe(payload.email)
    except InvalidSubscriptionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    if outcome is SubscribeOutcome.CONFLICT:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=ConflictResponse(message=ALREADY_REGISTERED).model_dump(),
        )
    return SubscribeResponse()
