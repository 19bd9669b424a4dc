# urbanstay/schemas/auth.py
from typing import Optional
from pydantic import BaseModel

from urbanstay.schemas.user import UserOut


class Token(BaseModel):
    success: bool = True
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: Optional[UserOut] = None

    model_config = {"from_attributes": True}


class RefreshRequest(BaseModel):
    refresh_token: str


class LogoutRequest(BaseModel):
    refresh_token: Optional[str] = None
