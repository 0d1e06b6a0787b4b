"""Chat API routes: event chat, realtime feed and threads."""

import asyncio
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Query, Request, WebSocket, status

from api.dependencies.auth import CurrentUser, get_auth_provider
from api.v1.dependencies import get_chat_service, get_realtime_broker
from api.v1.schemas.message import (
    DirectThreadCreate,
    MessageCreate,
    MessageDetailResponse,
    MessageListResponse,
    MessageResponse,
    MessageViewDetailResponse,
    MessageViewResponse,
    ThreadDetailResponse,
    ThreadListResponse,
    ThreadResponse,
)
from core.config import settings
from core.exceptions import AppException
from core.rate_limit import CHAT_LIMIT, READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.chat_service import MESSAGES_TABLE, ChatService
from infrastructure.auth.provider import IAuthProvider
from infrastructure.realtime.broker import ChangeNotification, IRealtimeBroker
from infrastructure.realtime.outbox import FeedOutbox

logger = structlog.get_logger()

router = APIRouter(tags=["messages"])


# --- Event chat ---


@router.get(
    "/events/{event_id}/messages",
    response_model=MessageListResponse,
    summary="Event chat history",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_event_messages(
    request: Request,
    event_id: UUID,
    user: CurrentUser,
    service: ChatService = Depends(get_chat_service),
) -> MessageListResponse:
    """Messages oldest first, each with the sender's name and avatar."""
    messages = await service.list_event_messages(event_id, user.id)
    return MessageListResponse(
        data=[MessageViewResponse.model_validate(m) for m in messages],
        meta={"count": len(messages)},
    )


@router.post(
    "/events/{event_id}/messages",
    response_model=MessageDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post to event chat",
    responses={403: {"description": "Only the host and joined attendees can post"}},
)
@limiter.limit(CHAT_LIMIT)  # type: ignore[untyped-decorator]
async def send_event_message(
    request: Request,
    event_id: UUID,
    body: MessageCreate,
    user: CurrentUser,
    service: ChatService = Depends(get_chat_service),
) -> MessageDetailResponse:
    message = await service.send_event_message(
        event_id,
        user.id,
        body.content,
        message_type=body.message_type,
        reply_to_id=body.reply_to_id,
    )
    return MessageDetailResponse(data=MessageResponse.model_validate(message))


@router.websocket("/events/{event_id}/messages/ws")
async def event_messages_feed(
    websocket: WebSocket,
    event_id: UUID,
    token: str | None = Query(None),
    auth_provider: IAuthProvider = Depends(get_auth_provider),
    broker: IRealtimeBroker = Depends(get_realtime_broker),
    service: ChatService = Depends(get_chat_service),
) -> None:
    """Push an insert notification for every new message in an event's chat.

    Frames carry only ``id``, ``thread_id`` and ``event_id``; clients fetch
    ``GET /messages/{id}`` for display fields.
    """
    user = await auth_provider.validate_token(token) if token else None
    if not user:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        await service.authorize_event_chat(event_id, user.id)
    except AppException as exc:
        logger.info(
            "realtime_feed_rejected",
            event_id=str(event_id),
            user_id=str(user.id),
            error_code=exc.error_code.value,
        )
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    outbox = FeedOutbox(settings.realtime_outbox_size)

    async def on_insert(notification: ChangeNotification) -> None:
        if not outbox.push(
            {
                "type": notification.event_type,
                "table": notification.table,
                "record": notification.record,
                "commit_timestamp": notification.commit_timestamp.isoformat(),
            }
        ):
            subscription.unsubscribe()

    async def forward() -> None:
        while True:
            frame = await outbox.next_frame()
            if frame is None:
                break
            await websocket.send_json(frame)
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)

    subscription = broker.subscribe(MESSAGES_TABLE, "event_id", event_id, on_insert)
    sender = asyncio.create_task(forward())
    logger.info("realtime_feed_opened", event_id=str(event_id), user_id=str(user.id))

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
    finally:
        subscription.unsubscribe()
        sender.cancel()
        (outcome,) = await asyncio.gather(sender, return_exceptions=True)
        if isinstance(outcome, Exception):
            logger.warning("realtime_feed_send_failed", error=str(outcome))
        logger.info("realtime_feed_closed", event_id=str(event_id), user_id=str(user.id))


@router.get(
    "/messages/{message_id}",
    response_model=MessageViewDetailResponse,
    summary="Get one message",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_message(
    request: Request,
    message_id: UUID,
    user: CurrentUser,
    service: ChatService = Depends(get_chat_service),
) -> MessageViewDetailResponse:
    """Follow-up read for a realtime notification."""
    view = await service.get_message(message_id, user.id)
    return MessageViewDetailResponse(data=MessageViewResponse.model_validate(view))


# --- Threads ---


@router.get("/threads", response_model=ThreadListResponse, summary="My inbox")
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_threads(
    request: Request,
    user: CurrentUser,
    service: ChatService = Depends(get_chat_service),
) -> ThreadListResponse:
    threads = await service.get_inbox(user.id)
    return ThreadListResponse(
        data=[ThreadResponse.model_validate(t) for t in threads],
        meta={"count": len(threads)},
    )


@router.post(
    "/threads/direct",
    response_model=ThreadDetailResponse,
    summary="Open a direct conversation",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def open_direct_thread(
    request: Request,
    body: DirectThreadCreate,
    user: CurrentUser,
    service: ChatService = Depends(get_chat_service),
) -> ThreadDetailResponse:
    """Returns the existing thread when the two users already have one."""
    thread = await service.open_direct_thread(user.id, body.user_id)
    return ThreadDetailResponse(data=ThreadResponse.model_validate(thread))


@router.get(
    "/threads/{thread_id}/messages",
    response_model=MessageListResponse,
    summary="Thread history",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_thread_messages(
    request: Request,
    thread_id: UUID,
    user: CurrentUser,
    service: ChatService = Depends(get_chat_service),
) -> MessageListResponse:
    messages = await service.list_thread_messages(thread_id, user.id)
    return MessageListResponse(
        data=[MessageViewResponse.model_validate(m) for m in messages],
        meta={"count": len(messages)},
    )


@router.post(
    "/threads/{thread_id}/messages",
    response_model=MessageDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post to a thread",
)
@limiter.limit(CHAT_LIMIT)  # type: ignore[untyped-decorator]
async def send_thread_message(
    request: Request,
    thread_id: UUID,
    body: MessageCreate,
    user: CurrentUser,
    service: ChatService = Depends(get_chat_service),
) -> MessageDetailResponse:
    message = await service.send_thread_message(
        thread_id,
        user.id,
        body.content,
        message_type=body.message_type,
        reply_to_id=body.reply_to_id,
    )
    return MessageDetailResponse(data=MessageResponse.model_validate(message))
