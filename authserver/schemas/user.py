"""
Pydantic schemas for User responses.
"""
from datetime import datetime

from pydantic import BaseModel

from authserver.models.user import ProviderType, RoleType


class UserResponse(BaseModel):
    id: int
    username: str
    provider_type: ProviderType
    role: RoleType
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PrincipalResponse(BaseModel):
    id: int
    username: str
    role: RoleType
    authorities: list[str]

    model_config = {"from_attributes": True}
