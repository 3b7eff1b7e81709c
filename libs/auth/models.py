import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ClientIdentity(BaseModel):
    """
    Signed-in customer as stored in the session's client slot.
    Never carries credentials.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None


class AdminIdentity(BaseModel):
    """Signed-in back-office user as stored in the session's admin slot."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str
