"""Back-office login router."""

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_session, require_admin
from libs.auth.models import AdminIdentity
from libs.auth.sessions import SessionContext
from libs.db.session import get_async_db
from services.storefront_service.schemas import AdminResponse, LoginRequest
from services.storefront_service.services.identity import authenticate_admin
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-auth"])


@router.post("/auth/login", response_model=AdminResponse)
async def admin_login(
    data: LoginRequest,
    session: SessionContext = Depends(get_session),
    db: AsyncSession = Depends(get_async_db),
):
    admin = await authenticate_admin(db, email=data.email, password=data.password)
    identity = AdminIdentity.model_validate(admin)
    await session.login_admin(identity)
    return identity


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
async def admin_logout(session: SessionContext = Depends(get_session)):
    await session.logout_admin()
    return None


@router.get("/auth/me", response_model=AdminResponse)
async def admin_me(admin: AdminIdentity = Depends(require_admin)):
    return admin
