from typing import Any, Literal

from pydantic import BaseModel


class SubscribeRequest(BaseModel):
    model_config = {"extra": "ignore"}

    # Left untyped so the service decides between "Invalid input" and "Invalid format".
    email: Any = None


class SubscribeResponse(BaseModel):
    ok: Literal[True] = True
    stored: bool = True


class ConflictResponse(BaseModel):
    ok: Literal[False] = False
    message: str


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    ok: bool = True
