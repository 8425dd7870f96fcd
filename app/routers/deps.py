import asyncio
from typing import AsyncIterator, Optional

from fastapi import Depends, HTTPException, Request, Response, status

from app.backend.cancellation import CancelToken
from app.backend.client import AppwriteClient
from app.core.config import settings
from app.models.user import User
from app.services.content import ContentService
from app.services.forms import FormResult, FormStatus
from app.services.session import SessionContext, SessionManager

DISCONNECT_POLL_INTERVAL = 0.1


async def watch_disconnect(request: Request, token: CancelToken,
                           interval: float = DISCONNECT_POLL_INTERVAL) -> None:
    """Cancel ``token`` as soon as the caller drops the connection."""
    while not token.cancelled:
        if await request.is_disconnected():
            token.cancel()
            return
        await asyncio.sleep(interval)


async def get_cancel_token(request: Request) -> AsyncIterator[CancelToken]:
    # Backend calls made in the threadpool check the token before and after each round trip
    token = CancelToken()
    watcher = asyncio.create_task(watch_disconnect(request, token))
    try:
        yield token
    finally:
        watcher.cancel()
        token.cancel()


def get_client(request: Request) -> AppwriteClient:
    return AppwriteClient(settings, session_secret=request.cookies.get(settings.SESSION_COOKIE_NAME))


def get_session_context(
    client: AppwriteClient = Depends(get_client),
    cancel: CancelToken = Depends(get_cancel_token),
) -> SessionContext:
    return SessionContext(SessionManager(client, cancel=cancel))


def get_content_service(
    client: AppwriteClient = Depends(get_client),
    cancel: CancelToken = Depends(get_cancel_token),
) -> ContentService:
    return ContentService(client, settings, cancel=cancel)


def get_current_user_optional(ctx: SessionContext = Depends(get_session_context)) -> Optional[User]:
    return ctx.user


def get_current_user(ctx: SessionContext = Depends(get_session_context)) -> User:
    user = ctx.user
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You must be logged in to do that",
        )
    return user


def store_session_cookie(response: Response, ctx: SessionContext) -> None:
    if ctx.session_secret:
        response.set_cookie(
            settings.SESSION_COOKIE_NAME,
            ctx.session_secret,
            httponly=True,
            samesite="lax",
            secure=settings.is_production,
        )
    else:
        response.delete_cookie(settings.SESSION_COOKIE_NAME)


def raise_for_form(result: FormResult) -> FormResult:
    """Turn a failed or invalid form submission into an HTTP error."""
    if result.field_errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Please fix the highlighted fields", "errors": result.field_errors},
        )
    if result.status == FormStatus.ERROR:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)
    return result
