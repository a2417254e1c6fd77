"""Messaging API routes."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ...app import Application
from ...dialogs import TurnResult
from ...dialogs.builtin import WELCOME
from ...errors import RegistryError
from ...logging_config import get_logger
from ...models import InboundMessage

logger = get_logger(__name__)


class MessageRequest(BaseModel):
    """Inbound activity from the channel."""

    address: str = Field(min_length=1)
    text: str
    timestamp: datetime | None = None
    reply_url: str | None = None


class ConversationRequest(BaseModel):
    """Conversation start notification."""

    address: str = Field(min_length=1)
    reply_url: str | None = None


class TurnResponse(BaseModel):
    """Activities produced by one turn, in delivery order."""

    activities: list[dict[str, Any]]
    stack: list[str]
    intent: str | None = None
    persisted: bool


def _to_response(result: TurnResult) -> dict:
    return {
        "activities": [activity.to_dict() for activity in result.activities],
        "stack": [frame.dialog for frame in result.session.stack],
        "intent": result.intent.intent if result.intent else None,
        "persisted": result.persisted,
    }


def create_messaging_router(app: Application) -> APIRouter:
    """Create messaging router."""
    router = APIRouter(prefix="/api", tags=["messaging"])

    def _push(address: str, reply_url: str | None, result: TurnResult) -> None:
        if reply_url:
            app.sender.register(address, reply_url)
            app.dispatcher.deliver(address, result.activities)

    @router.post("/messages", response_model=TurnResponse)
    async def post_message(request: MessageRequest) -> dict:
        """Handle one user message through the dialog engine."""
        message = InboundMessage(
            address=request.address,
            text=request.text,
            timestamp=request.timestamp or datetime.now().astimezone(),
            reply_url=request.reply_url,
        )
        try:
            result = await app.engine.handle_message(message)
        except Exception as e:
            logger.error("Turn failed for %s: %s", request.address, e, exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

        _push(request.address, request.reply_url, result)
        return _to_response(result)

    @router.post("/conversations", response_model=TurnResponse)
    async def start_conversation(request: ConversationRequest) -> dict:
        """Greet a user who joined the conversation."""
        try:
            result = await app.engine.begin_dialog(request.address, WELCOME)
        except RegistryError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except Exception as e:
            logger.error("Welcome failed for %s: %s", request.address, e, exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

        _push(request.address, request.reply_url, result)
        return _to_response(result)

    return router
