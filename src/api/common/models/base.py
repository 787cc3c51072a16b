from datetime import datetime
from sqlmodel import Field, SQLModel, DateTime
from sqlalchemy.ext.declarative import declared_attr
from src.api.common.utils.datetime import get_current_datetime


class TimestampMixin(SQLModel):
    """Mixin to add created_at and updated_at fields to models"""
    created_at: datetime = Field(
        default_factory=get_current_datetime,
        sa_type=DateTime(timezone=True), nullable=False)
    updated_at: datetime = Field(
        default_factory=get_current_datetime,
        sa_type=DateTime(timezone=True), nullable=False)

    def touch(self) -> None:
        self.updated_at = get_current_datetime()


class VersionMixin(SQLModel):
    """Mixin carrying an optimistic concurrency token.

    Every write path that replaces the aggregate bumps the version, and
    callers must send back the version they read.
    """
    version: int = Field(default=1, nullable=False)

    def bump_version(self) -> None:
        self.version = (self.version or 0) + 1


class BaseModel(SQLModel):
    """Base model for all models in the application"""
    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower()
