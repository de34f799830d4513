"""SQLModel table definitions mirroring the existing Postgres schema.

These models use the Mirror Pattern - they exactly match existing Postgres tables
without running migrations. Notes and recordings are owned by the recording
flow; the five extraction tables are append-only from this service's side.
"""
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, Text, DateTime, Date
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from typing import Any, Dict, List, Optional
from datetime import date, datetime, timezone
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Source tables (read, plus smartified_at update) ---

class NoteModel(SQLModel, table=True):
    """Mirror of notes table.

    Only the columns the extraction pipeline reads or writes are mapped.
    """
    __tablename__ = "notes"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(sa_column_kwargs={"name": "user_id"})
    raw_transcript: Optional[str] = Field(default=None, sa_column=Column(Text, name="raw_transcript"))
    content: Optional[str] = Field(default=None, sa_column=Column(Text))
    formatted_content: Optional[str] = Field(default=None, sa_column=Column(Text, name="formatted_content"))
    audio_url: Optional[str] = Field(default=None, sa_column=Column(Text, name="audio_url"))
    duration_seconds: Optional[int] = Field(default=None, sa_column_kwargs={"name": "duration_seconds"})
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), name="created_at")
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), name="updated_at")
    )
    smartified_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), name="smartified_at", nullable=True)
    )


class RecordingModel(SQLModel, table=True):
    """Mirror of recordings table. Extraction rows hang off recording_id."""
    __tablename__ = "recordings"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(sa_column_kwargs={"name": "user_id"})
    audio_url: Optional[str] = Field(default=None, sa_column=Column(Text, name="audio_url"))
    raw_transcript: Optional[str] = Field(default=None, sa_column=Column(Text, name="raw_transcript"))
    cleaned_transcript: Optional[str] = Field(default=None, sa_column=Column(Text, name="cleaned_transcript"))
    duration_seconds: int = Field(default=0, sa_column_kwargs={"name": "duration_seconds"})
    processing_status: str = Field(default="completed", sa_column_kwargs={"name": "processing_status"})
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), name="created_at")
    )


# --- Extraction tables (insert only) ---

class ActionItemModel(SQLModel, table=True):
    """Mirror of action_items table."""
    __tablename__ = "action_items"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    recording_id: UUID = Field(sa_column_kwargs={"name": "recording_id"})
    task: str = Field(sa_column=Column(Text, nullable=False))
    assignee: Optional[str] = Field(default=None, sa_column=Column(Text))
    deadline: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    priority: str = Field(default="medium")
    status: str = Field(default="open")
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), name="created_at")
    )


class InvestorUpdateModel(SQLModel, table=True):
    """Mirror of investor_updates table."""
    __tablename__ = "investor_updates"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    recording_id: UUID = Field(sa_column_kwargs={"name": "recording_id"})
    draft_subject: Optional[str] = Field(default=None, sa_column=Column(Text, name="draft_subject"))
    draft_body: Optional[str] = Field(default=None, sa_column=Column(Text, name="draft_body"))
    wins: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(Text)))
    metrics: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONB))
    challenges: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(Text)))
    asks: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(Text)))
    status: str = Field(default="draft")
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), name="created_at")
    )


class ProgressLogModel(SQLModel, table=True):
    """Mirror of progress_logs table."""
    __tablename__ = "progress_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    recording_id: UUID = Field(sa_column_kwargs={"name": "recording_id"})
    week_of: date = Field(sa_column=Column(Date, name="week_of", nullable=False))
    completed: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(Text)))
    in_progress: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(Text), name="in_progress"))
    blocked: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(Text)))
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), name="created_at")
    )


class ProductIdeaModel(SQLModel, table=True):
    """Mirror of product_ideas table."""
    __tablename__ = "product_ideas"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    recording_id: UUID = Field(sa_column_kwargs={"name": "recording_id"})
    idea: str = Field(sa_column=Column(Text, nullable=False))
    category: str = Field(default="feature")
    priority: str = Field(default="medium")
    context: Optional[str] = Field(default=None, sa_column=Column(Text))
    status: str = Field(default="idea")
    votes: int = Field(default=0)
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), name="created_at")
    )


class BrainDumpModel(SQLModel, table=True):
    """Mirror of brain_dump table."""
    __tablename__ = "brain_dump"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    recording_id: UUID = Field(sa_column_kwargs={"name": "recording_id"})
    content: str = Field(sa_column=Column(Text, nullable=False))
    category: str = Field(default="followup")
    participants: List[str] = Field(default_factory=list, sa_column=Column(ARRAY(Text)))
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), name="created_at")
    )
