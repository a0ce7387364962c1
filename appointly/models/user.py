from datetime import datetime

from sqlmodel import Field, SQLModel

from appointly.models.base import NAIVE_UTC, utc_naive_now


class UserBase(SQLModel):
    email: str = Field(unique=True, index=True, max_length=255)
    name: str = Field(max_length=100)


class User(UserBase, table=True):
    """Calendar owner. Rules and reservations hang off this row."""

    __tablename__ = "users"
    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utc_naive_now, sa_type=NAIVE_UTC)


class UserCreate(SQLModel):
    email: str
    password: str
    name: str


class UserPublic(SQLModel):
    id: int
    email: str
    name: str
    created_at: datetime
