from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status

from libs.auth.models import AdminIdentity, ClientIdentity
from libs.auth.sessions import (
    SessionContext,
    SessionStore,
    build_session_store,
    new_session_id,
)

SESSION_HEADER = "X-Session-ID"


@lru_cache
def get_session_store() -> SessionStore:
    """
    Return the process-wide session store (memory or Redis, per settings).
    """
    return build_session_store()


async def get_session(
    request: Request,
    response: Response,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionContext:
    """
    Load the caller's session slots.

    Visitors without a session ID get a fresh one, echoed back in the
    response header so the client can persist it.
    """
    session_id = request.headers.get(SESSION_HEADER) or new_session_id()
    response.headers[SESSION_HEADER] = session_id
    return await SessionContext.load(store, session_id)


async def get_current_client(
    session: Annotated[SessionContext, Depends(get_session)],
) -> ClientIdentity:
    """
    Return the customer signed in on this session.
    """
    client = session.client
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Non connecté",
        )
    return client


async def require_admin(
    session: Annotated[SessionContext, Depends(get_session)],
) -> AdminIdentity:
    """
    Gate back-office routes on the session's admin slot.
    The client slot grants nothing here.
    """
    admin = session.admin
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin session required",
        )
    return admin
