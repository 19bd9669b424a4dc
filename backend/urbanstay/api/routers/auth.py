# urbanstay/api/routers/auth.py
import logging
import re
from datetime import timedelta
from typing import Dict, Any, Optional

from fastapi import APIRouter, BackgroundTasks, Query, status
from jose import JWTError
from pydantic import EmailStr

from urbanstay.api.dependencies import AdminUser, CurrentUser, DbSession
from urbanstay.db import crud_users, crud_properties
from urbanstay.core.config import get_settings
from urbanstay.db.enums import UserRole
from urbanstay.db.models import utcnow
from urbanstay.schemas.auth import Token, RefreshRequest, LogoutRequest
from urbanstay.schemas.property import PropertyBase
from urbanstay.schemas.user import (
    UserCreate,
    UserLogin,
    UserOut,
    ProfileUpdate,
    PasswordUpdate,
    ForgotPassword,
    ResetPassword,
    UserRoleUpdate,
)
from urbanstay.core.security import (
    create_token_pair,
    generate_otp,
    is_strong_password,
    verify_password,
    verify_refresh_token,
)
from urbanstay.exceptions.custom import (
    AuthenticationError,
    NotFoundError,
    ValidationError,
)
from urbanstay.services import mailer

logger = logging.getLogger(__name__)

router = APIRouter()

WEAK_PASSWORD = (
    "Password must be at least 8 characters and contain an uppercase letter, "
    "a lowercase letter, a number and a special character"
)
INVALID_OTP = "Invalid or expired OTP"
OTP_SENT = "If the email exists, an OTP was sent"


async def _token_response(db, user) -> Dict[str, Any]:
    """
    Issue a fresh access/refresh pair and persist the refresh token:
    { success, access_token, refresh_token, token_type, user }
    """
    access, refresh = create_token_pair(user)
    await crud_users.save_refresh_token(db, user.id, refresh)
    return {
        "success": True,
        "access_token": access,
        "refresh_token": refresh,
        "token_type": "bearer",
        "user": UserOut.model_validate(user),
    }


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, db: DbSession, background_tasks: BackgroundTasks):
    if not is_strong_password(payload.password):
        raise ValidationError(WEAK_PASSWORD)

    existing = await crud_users.get_user_by_email(db, payload.email)
    if existing:
        raise ValidationError("User already exists with this email")

    user = await crud_users.create_user(
        db=db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        phone=payload.phone,
        role=payload.role,
    )
    logger.info("User %s registered as %s", user.id, user.role)

    background_tasks.add_task(mailer.send_welcome_email, user.email, user.name, user.role)
    return await _token_response(db, user)


@router.post("/login", response_model=Token)
async def login(payload: UserLogin, db: DbSession):
    user = await crud_users.get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")

    await crud_users.touch_last_login(db, user)
    return await _token_response(db, user)


@router.post("/refresh", response_model=Token)
async def refresh(body: RefreshRequest, db: DbSession):
    try:
        payload = verify_refresh_token(body.refresh_token)
    except JWTError:
        raise AuthenticationError("Invalid refresh token")

    if not await crud_users.is_refresh_token_active(db, body.refresh_token):
        raise AuthenticationError("Refresh token has been revoked")

    user = await crud_users.get_user(db, int(payload["user_id"]))
    if not user:
        raise AuthenticationError("User not found")

    return await _token_response(db, user)


@router.post("/logout")
async def logout(db: DbSession, body: Optional[LogoutRequest] = None):
    # body is optional; without a token there is nothing to revoke
    if body and body.refresh_token:
        await crud_users.revoke_refresh_token(db, body.refresh_token)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/check-email")
async def check_email(db: DbSession, email: EmailStr = Query(...)):
    existing = await crud_users.get_user_by_email(db, email)
    return {"success": True, "data": {"email": email, "available": existing is None}}


@router.post("/forgotpassword")
async def forgot_password(body: ForgotPassword, db: DbSession, background_tasks: BackgroundTasks):
    # same answer whether or not the account exists
    user = await crud_users.get_user_by_email(db, body.email)
    if not user:
        logger.info("Password reset requested for unknown email")
        return {"success": True, "message": OTP_SENT}

    minutes = get_settings().PASSWORD_RESET_OTP_MINUTES
    otp = generate_otp()
    await crud_users.set_reset_otp(db, user, otp, utcnow() + timedelta(minutes=minutes))
    logger.info("Password reset code issued for user %s", user.id)

    background_tasks.add_task(mailer.send_password_reset_otp_email, user.email, otp, minutes)
    return {"success": True, "message": OTP_SENT}


@router.post("/resetpassword")
async def reset_password(body: ResetPassword, db: DbSession):
    if not re.fullmatch(r"[0-9]{6}", body.otp.strip()):
        raise ValidationError("OTP must be a 6-digit number")
    if not is_strong_password(body.new_password):
        raise ValidationError(WEAK_PASSWORD)

    user = await crud_users.get_user_by_email(db, body.email)
    if not user or not user.otp_hash or not user.otp_expires_at:
        raise ValidationError(INVALID_OTP)
    if user.otp_expires_at < utcnow():
        raise ValidationError(INVALID_OTP)
    if not verify_password(body.otp.strip(), user.otp_hash):
        raise ValidationError(INVALID_OTP)

    await crud_users.reset_password(db, user, body.new_password)
    logger.info("Password reset for user %s", user.id)
    return {"success": True, "message": "Password reset successfully"}


@router.get("/me")
async def me(current_user: CurrentUser, db: DbSession):
    favorites = await crud_users.list_favorite_ids(db, current_user.id)
    data = UserOut.model_validate(current_user).model_dump()
    data["favorites"] = favorites
    return {"success": True, "data": data}


@router.put("/updateprofile")
async def update_profile(body: ProfileUpdate, current_user: CurrentUser, db: DbSession):
    user = await crud_users.update_user(db, current_user, body.model_dump(exclude_unset=True))
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": UserOut.model_validate(user),
    }


@router.put("/updatepassword", response_model=Token)
async def update_password(body: PasswordUpdate, current_user: CurrentUser, db: DbSession):
    if not verify_password(body.current_password, current_user.hashed_password):
        raise AuthenticationError("Current password is incorrect")
    if not is_strong_password(body.new_password):
        raise ValidationError(WEAK_PASSWORD)

    await crud_users.set_password(db, current_user, body.new_password)
    # new pair; save_refresh_token revokes the old refresh tokens
    return await _token_response(db, current_user)


@router.put("/favorites/{property_id}")
async def toggle_favorite(property_id: int, current_user: CurrentUser, db: DbSession):
    prop = await crud_properties.get_property(db, property_id)
    if not prop:
        raise NotFoundError("Property")

    added = await crud_users.toggle_favorite(db, current_user.id, property_id)
    favorites = await crud_users.list_favorite_ids(db, current_user.id)
    return {
        "success": True,
        "message": "Added to favorites" if added else "Removed from favorites",
        "data": {"is_favorite": added, "favorites": favorites},
    }


@router.get("/favorites")
async def list_favorites(current_user: CurrentUser, db: DbSession):
    items = await crud_users.list_favorites(db, current_user.id)
    return {
        "success": True,
        "count": len(items),
        "data": [PropertyBase.model_validate(p) for p in items],
    }


# ---------------------------
# Admin: user management
# ---------------------------

@router.get("/users")
async def admin_users(
    current_user: AdminUser,
    db: DbSession,
    role: Optional[UserRole] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    users, total = await crud_users.list_users(
        db,
        role=role.value if role else None,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "count": len(users),
        "total": total,
        "page": page,
        "pages": (total + limit - 1) // limit,
        "data": [UserOut.model_validate(u) for u in users],
    }


@router.put("/users/{user_id}/role")
async def set_role(user_id: int, body: UserRoleUpdate, current_user: AdminUser, db: DbSession):
    user = await crud_users.get_user(db, user_id)
    if not user:
        raise NotFoundError("User")
    user = await crud_users.update_user_role(db, user, body.role.value)
    logger.info("Admin %s set role of user %s to %s", current_user.id, user.id, user.role)
    return {
        "success": True,
        "message": "User role updated",
        "data": UserOut.model_validate(user),
    }


@router.delete("/users/{user_id}")
async def delete_user(user_id: int, current_user: AdminUser, db: DbSession):
    if user_id == current_user.id:
        raise ValidationError("You cannot delete your own account")

    user = await crud_users.get_user(db, user_id)
    if not user:
        raise NotFoundError("User")

    await crud_users.delete_user(db, user_id)
    logger.info("Admin %s deleted user %s", current_user.id, user_id)
    return {"success": True, "message": "User deleted successfully"}
