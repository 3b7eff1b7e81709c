"""Customer account router: registration, login, logout and profile."""

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_client, get_session
from libs.auth.models import ClientIdentity
from libs.auth.sessions import SessionContext
from libs.db.session import get_async_db
from services.storefront_service.schemas import (
    ClientProfileUpdate,
    ClientRegister,
    ClientResponse,
    LoginRequest,
)
from services.storefront_service.services.identity import (
    authenticate_client,
    register_client,
    update_profile,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["storefront-auth"])


@router.post(
    "/auth/register", response_model=ClientResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    data: ClientRegister,
    session: SessionContext = Depends(get_session),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a customer account and sign it in on this session."""
    client = await register_client(
        db,
        email=data.email,
        password=data.password,
        name=data.name,
        phone=data.phone,
        address=data.address,
    )
    identity = ClientIdentity.model_validate(client)
    await session.login_client(identity)
    return identity


@router.post("/auth/login", response_model=ClientResponse)
async def login(
    data: LoginRequest,
    session: SessionContext = Depends(get_session),
    db: AsyncSession = Depends(get_async_db),
):
    client = await authenticate_client(db, email=data.email, password=data.password)
    identity = ClientIdentity.model_validate(client)
    await session.login_client(identity)
    return identity


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(session: SessionContext = Depends(get_session)):
    """Clear the customer slot only; the cart and any admin slot survive."""
    await session.logout_client()
    return None


@router.get("/auth/me", response_model=ClientResponse)
async def me(client: ClientIdentity = Depends(get_current_client)):
    return client


@router.patch("/auth/me", response_model=ClientResponse)
async def update_me(
    data: ClientProfileUpdate,
    session: SessionContext = Depends(get_session),
    db: AsyncSession = Depends(get_async_db),
):
    """Partially update name, phone or address and refresh the session copy."""
    current = session.client
    updated = await update_profile(
        db,
        current.id if current else None,
        data.model_dump(exclude_unset=True),
    )
    identity = ClientIdentity.model_validate(updated)
    await session.login_client(identity)
    return identity
