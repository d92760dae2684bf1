from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, field_validator

TITLE_MIN_LENGTH = 2
TITLE_MAX_LENGTH = 300


class TaskCreate(BaseModel):
    title: str

    @field_validator("title")
    @classmethod
    def title_length(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty")
        if len(v) < TITLE_MIN_LENGTH:
            raise ValueError(f"title too short: must be at least {TITLE_MIN_LENGTH} characters")
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError(f"title too long: must be at most {TITLE_MAX_LENGTH} characters")
        return v


class TaskUpdate(BaseModel):
    """Partial update body.

    An empty (or missing) title leaves the stored title alone; ``status`` is
    always written, so omitting it marks the task as not completed.
    """
    title: Optional[str] = ""
    status: bool = False

    @field_validator("title")
    @classmethod
    def title_max_length(cls, v: Optional[str]) -> str:
        v = (v or "").strip()
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError(f"title too long: must be at most {TITLE_MAX_LENGTH} characters")
        return v

    def changes(self) -> dict:
        updates = {}
        if self.title:
            updates["title"] = self.title
        updates["status"] = self.status
        return updates


class AttachmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    path: str
    attachment_order: int
    timestamp: datetime


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    status: bool
    attachments: List[AttachmentOut] = []
