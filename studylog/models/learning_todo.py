from datetime import datetime, date
from sqlalchemy import Boolean, ForeignKey, Integer, Text, DateTime, Date, Enum, func
from sqlalchemy.orm import Mapped, mapped_column
import enum

from studylog.db.base import Base


class TodoStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class DeadlineType(str, enum.Enum):
    SHORT_TERM = "SHORT_TERM"
    LONG_TERM = "LONG_TERM"


class LearningTodo(Base):
    __tablename__ = "learning_todos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    note_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("notes.id", ondelete="CASCADE"), nullable=True, index=True
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        Enum(TodoStatus, name="todo_status_enum"),
        nullable=False,
        default=TodoStatus.PENDING,
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    deadline_type: Mapped[str | None] = mapped_column(
        Enum(DeadlineType, name="deadline_type_enum"), nullable=True
    )
    # True for suggested items the user accepted, False for hand-written ones.
    is_checked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
