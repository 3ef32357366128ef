"""
NoteAnalysis — structured enrichment output for a Note.

Written once by the background enrichment task; its presence is what
moves a note from ANALYZING to COMPLETED. The JSON blobs are stored and
returned verbatim.
"""
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, ForeignKey, Integer, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from studylog.db.base import Base


class NoteAnalysis(Base):
    __tablename__ = "notes_analysis"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    note_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    summary_json: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    skill_proposal_json: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    feedback_json: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    suggested_todos_json: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    fact_checks_json: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    analyzed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
