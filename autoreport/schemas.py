from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field

from autoreport.models import utcnow
from autoreport.trial import days_left


# ==========================================================
# AUTH
# ==========================================================

class UserRegister(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    trial_start: datetime
    trial_end: datetime
    trial_active: bool

    @computed_field
    @property
    def trial_days_left(self) -> int:
        return days_left(self, utcnow())


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ResetRequest(BaseModel):
    email: EmailStr


class ResetRequestResponse(BaseModel):
    message: str
    reset_token: Optional[str] = None


class ResetConfirm(BaseModel):
    email: EmailStr
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=128)


class MessageResponse(BaseModel):
    message: str


# ==========================================================
# CLIENTS
# ==========================================================

class ClientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    google_ads_id: Optional[str] = None
    meta_ads_id: Optional[str] = None


class ClientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    google_ads_id: Optional[str] = None
    meta_ads_id: Optional[str] = None
    created_at: datetime
