"""Client and admin accounts: registration, credential checks, profile updates."""

import hashlib
import hmac
import secrets
import uuid
from typing import Optional, Type, TypeVar, Union

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.storefront_service.models import Admin, Client
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

PASSWORD_ALGORITHM = "pbkdf2_sha256"
MIN_PASSWORD_LENGTH = 6

INVALID_CREDENTIALS = "Email ou mot de passe incorrect"
EMAIL_ALREADY_USED = "Cet email est déjà utilisé"
NOT_AUTHENTICATED = "Non connecté"


def hash_password(password: str, *, iterations: Optional[int] = None) -> str:
    """Hash a password as ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""
    iterations = iterations or get_settings().PASSWORD_HASH_ITERATIONS
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), iterations
    )
    return f"{PASSWORD_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """Constant-time check of a password against a stored hash."""
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != PASSWORD_ALGORITHM:
        return False

    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), rounds
    )
    return hmac.compare_digest(digest.hex(), expected)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

AccountT = TypeVar("AccountT", Client, Admin)


async def _authenticate(
    db: AsyncSession, model: Type[AccountT], email: str, password: str
) -> AccountT:
    try:
        result = await db.execute(select(model).where(model.email == email.lower()))
        rows = result.scalars().all()
    except SQLAlchemyError:
        logger.exception("Credential lookup failed for %s", model.__tablename__)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service momentanément indisponible",
        )

    # Exactly one account must match.
    if len(rows) != 1 or not verify_password(password, rows[0].password_hash):
        logger.info("Rejected %s login for %s", model.__tablename__, email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS
        )
    return rows[0]


async def authenticate_client(db: AsyncSession, *, email: str, password: str) -> Client:
    return await _authenticate(db, Client, email, password)


async def authenticate_admin(db: AsyncSession, *, email: str, password: str) -> Admin:
    return await _authenticate(db, Admin, email, password)


# ---------------------------------------------------------------------------
# Client accounts
# ---------------------------------------------------------------------------


async def register_client(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    name: str,
    phone: Optional[str] = None,
    address: Optional[str] = None,
) -> Client:
    """Create a client account. Fails with 409 when the email is taken."""
    email = email.lower()
    existing = await db.execute(select(Client.id).where(Client.email == email))
    if existing.first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=EMAIL_ALREADY_USED)

    client = Client(
        email=email,
        password_hash=hash_password(password),
        name=name,
        phone=phone or None,
        address=address or None,
    )
    db.add(client)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email.
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=EMAIL_ALREADY_USED)
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to register client %s", email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erreur lors de l'inscription",
        )

    await db.refresh(client)
    logger.info("Registered client %s", client.id)
    return client


async def update_profile(
    db: AsyncSession, client_id: Optional[Union[uuid.UUID, str]], updates: dict
) -> Client:
    """Apply a partial profile patch to the signed-in client."""
    if client_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NOT_AUTHENTICATED)

    client = await db.get(Client, uuid.UUID(str(client_id)))
    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")

    for field, value in updates.items():
        setattr(client, field, value)

    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to update profile for client %s", client_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erreur lors de la mise à jour du profil",
        )

    await db.refresh(client)
    return client
