# urbanstay/db/crud_users.py

from typing import Optional, List

from sqlalchemy import select, update, delete, insert, func
from sqlalchemy.ext.asyncio import AsyncSession

from urbanstay.db.models import User, UserRefreshToken, Property, user_favorites, utcnow
from urbanstay.core.security import get_password_hash


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    res = await db.execute(select(User).where(User.id == user_id))
    return res.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    res = await db.execute(select(User).where(User.email == email.strip().lower()))
    return res.scalar_one_or_none()


async def list_users(
    db: AsyncSession,
    *,
    role: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[List[User], int]:
    stmt = select(User)
    if role:
        stmt = stmt.where(User.role == role)

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()

    stmt = stmt.order_by(User.id.desc()).offset((page - 1) * limit).limit(limit)
    res = await db.execute(stmt)
    return list(res.scalars().all()), int(total)


async def create_user(
    db: AsyncSession,
    name: str,
    email: str,
    password: str,
    phone: Optional[str] = None,
    role: str = "user",
) -> User:
    """
    Create a user with hashed password. Email is stored lower-cased.
    """
    user = User(
        name=name.strip(),
        email=email.strip().lower(),
        phone=phone,
        hashed_password=get_password_hash(password),
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def update_user(db: AsyncSession, user: User, data: dict) -> User:
    for k, v in data.items():
        if v is not None:
            setattr(user, k, v)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def set_password(db: AsyncSession, user: User, password: str) -> None:
    user.hashed_password = get_password_hash(password)
    db.add(user)
    await db.commit()


async def touch_last_login(db: AsyncSession, user: User) -> None:
    user.last_login = utcnow()
    db.add(user)
    await db.commit()


async def update_user_role(db: AsyncSession, user: User, role: str) -> User:
    user.role = role
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    # rows owned by the user go through ON DELETE CASCADE
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()


# --- favorites ---

async def list_favorite_ids(db: AsyncSession, user_id: int) -> List[int]:
    res = await db.execute(
        select(user_favorites.c.property_id).where(user_favorites.c.user_id == user_id)
    )
    return [row[0] for row in res.all()]


async def list_favorites(db: AsyncSession, user_id: int) -> List[Property]:
    stmt = (
        select(Property)
        .join(user_favorites, user_favorites.c.property_id == Property.id)
        .where(user_favorites.c.user_id == user_id)
        .order_by(Property.id.desc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def toggle_favorite(db: AsyncSession, user_id: int, property_id: int) -> bool:
    """
    Add the property to favorites, or remove it if already there.
    Returns True when the property is a favorite afterwards.
    """
    res = await db.execute(
        select(user_favorites.c.property_id).where(
            user_favorites.c.user_id == user_id,
            user_favorites.c.property_id == property_id,
        )
    )
    if res.first() is not None:
        await db.execute(
            delete(user_favorites).where(
                user_favorites.c.user_id == user_id,
                user_favorites.c.property_id == property_id,
            )
        )
        added = False
    else:
        await db.execute(insert(user_favorites).values(user_id=user_id, property_id=property_id))
        added = True
    await db.commit()
    return added


# --- refresh tokens ---

async def save_refresh_token(db: AsyncSession, user_id: int, token: str) -> None:
    """
    Store a new refresh token for the user.
    Simple strategy: revoke existing, then insert new.
    """
    await db.execute(
        update(UserRefreshToken)
        .where(UserRefreshToken.user_id == user_id, UserRefreshToken.revoked == False)  # noqa: E712
        .values(revoked=True)
    )

    db.add(UserRefreshToken(user_id=user_id, token=token))
    await db.commit()


async def is_refresh_token_active(db: AsyncSession, token: str) -> bool:
    res = await db.execute(
        select(UserRefreshToken.id).where(
            UserRefreshToken.token == token,
            UserRefreshToken.revoked == False,  # noqa: E712
        )
    )
    return res.first() is not None


async def revoke_refresh_token(db: AsyncSession, token: str) -> None:
    """
    Mark a single refresh token as revoked.
    """
    await db.execute(
        update(UserRefreshToken)
        .where(UserRefreshToken.token == token, UserRefreshToken.revoked == False)  # noqa: E712
        .values(revoked=True)
    )
    await db.commit()


# --- password reset ---

async def set_reset_otp(db: AsyncSession, user: User, otp: str, expires_at) -> None:
    user.otp_hash = get_password_hash(otp)
    user.otp_expires_at = expires_at
    db.add(user)
    await db.commit()


async def reset_password(db: AsyncSession, user: User, password: str) -> None:
    """
    Set the new password, drop the reset code and revoke every refresh token.
    """
    user.hashed_password = get_password_hash(password)
    user.otp_hash = None
    user.otp_expires_at = None
    db.add(user)
    await db.execute(
        update(UserRefreshToken)
        .where(UserRefreshToken.user_id == user.id, UserRefreshToken.revoked == False)  # noqa: E712
        .values(revoked=True)
    )
    await db.commit()
