"""
Abstract base for the planner's tables.
"""
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class BaseModel(Base):
    """
    UUID primary key plus database-maintained ``created_at``/``updated_at``.

    ``eager_defaults`` fetches the server-side timestamps right after
    INSERT/UPDATE, so reading them never triggers lazy IO on an async
    session.
    """
    __abstract__ = True
    __mapper_args__ = {"eager_defaults": True}

    # Attributes shown by the default ``repr``
    __repr_attrs__ = ("id",)

    id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
        nullable=False,
    )

    def __repr__(self) -> str:
        attrs = ", ".join(
            f"{name}={self.__dict__.get(name)!r}" for name in self.__repr_attrs__
        )
        return f"<{type(self).__name__}({attrs})>"
