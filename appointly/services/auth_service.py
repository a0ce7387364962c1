import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from appointly.core.config import settings
from appointly.core.security import create_access_token, hash_password, verify_password
from appointly.models.user import User, UserCreate, UserPublic

logger = logging.getLogger(__name__)


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, data: UserCreate) -> User:
    user = User(
        email=data.email.lower(),
        name=data.name,
        hashed_password=hash_password(data.password),
    )
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


def user_to_public(user: User) -> UserPublic:
    return UserPublic(
        id=user.id,
        email=user.email,
        name=user.name,
        created_at=user.created_at,
    )


def make_access_token(user_id: int) -> tuple[str, int]:
    access = create_access_token(user_id)
    expires_in = settings.access_token_expire_minutes * 60
    return access, expires_in


async def login_user(
    session: AsyncSession, email: str, password: str
) -> tuple[User, str, int] | None:
    user = await get_user_by_email(session, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    access, expires_in = make_access_token(user.id)
    return user, access, expires_in


async def signup_user(
    session: AsyncSession, email: str, password: str, name: str
) -> User | None:
    existing = await get_user_by_email(session, email)
    if existing:
        return None
    try:
        async with session.begin_nested():
            user = await create_user(session, UserCreate(email=email, password=password, name=name))
    except IntegrityError:
        # lost a race with a concurrent signup for the same email
        return None
    logger.info("Owner account %s created", user.id)
    return user
