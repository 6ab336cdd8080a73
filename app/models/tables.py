# app/models/tables.py
import uuid
from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Text,
    Boolean,
)
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


def _new_id() -> str:
    return uuid.uuid4().hex


class QuestionRecord(Base):
    __tablename__ = "questions"
    id = Column(String, primary_key=True, default=_new_id)
    type = Column(String, index=True, nullable=False)
    content = Column(Text, default="")
    # List for rfib, {"0": [...], "1": [...]} for rwfib
    options = Column(JSON, nullable=True)
    correct_answers = Column(JSON, default=list)
    answer = Column(Text, nullable=True)
    difficulty = Column(String, nullable=True)
    task_number = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class AudioSampleRecord(Base):
    """A document of the writefromdictation or repeatsentence collection."""
    __tablename__ = "audio_samples"
    id = Column(String, primary_key=True, default=_new_id)
    collection = Column(String, index=True, nullable=False)
    reference_id = Column(String, nullable=True, index=True)
    text = Column(Text, nullable=False)
    audio = Column(JSON, default=dict)
    occurrence = Column(Integer, default=0)
    is_hidden = Column(Boolean, default=False)
    question_type = Column(String, nullable=True)
    topic = Column(String, nullable=True)
    vietnamese_translation = Column(Text, nullable=True)
    import_source = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SubmissionRecord(Base):
    __tablename__ = "submissions"
    id = Column(String, primary_key=True, default=_new_id)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    target = Column(String, nullable=False)
    status = Column(String, default="completed")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    answers = relationship(
        "AnswerRecord",
        back_populates="submission",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AnswerRecord.question_number",
    )


class AnswerRecord(Base):
    __tablename__ = "answers"
    id = Column(Integer, primary_key=True, autoincrement=True)
    submission_id = Column(String, ForeignKey("submissions.id", ondelete="CASCADE"), index=True)
    question_number = Column(Integer, nullable=False)
    question_id = Column(String, nullable=False)
    question_type = Column(String, nullable=False)
    content = Column(Text, default="")
    answer = Column(Text, default="")
    text = Column(Text, default="")
    time_spent = Column(Integer, default=0)
    options = Column(JSON, nullable=True)
    all_options = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    submission = relationship("SubmissionRecord", back_populates="answers")


class ShadowingParagraph(Base):
    __tablename__ = "shadowing_paragraphs"
    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, index=True, nullable=False)
    text = Column(Text, default="")
    url = Column(String, nullable=True)
