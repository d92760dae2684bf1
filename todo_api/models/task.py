from datetime import datetime, UTC
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from todo_api.database import Base


def _utcnow():
    return datetime.now(UTC)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True)
    title = Column(String(300), nullable=False)
    status = Column(Boolean, nullable=False, default=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    # last attachment order handed out for this task; only ever incremented
    attachment_seq = Column(Integer, nullable=False, default=0)

    owner = relationship("User", back_populates="tasks")
    attachments = relationship(
        "Attachment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Attachment.attachment_order",
    )


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), index=True, nullable=False)
    path = Column(String(255), nullable=False)
    attachment_order = Column(Integer, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    task = relationship("Task", back_populates="attachments")
