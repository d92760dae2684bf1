"""Owner-scoped persistence for tasks and their attachments.

Every method that touches a single task filters on ``(task_id, user_id)``
together. A task that exists under another owner is indistinguishable from one
that does not exist at all.
"""

import logging
from datetime import datetime, UTC
from typing import List, Optional, Tuple

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from todo_api.models.task import Task, Attachment

logger = logging.getLogger(__name__)


class TaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def _owned(self, task_id: int, user_id: int):
        return self.db.query(Task).filter(Task.id == task_id, Task.user_id == user_id)

    def list_all(self) -> List[Task]:
        """Every task of every user. Internal use only, never routed."""
        return self.db.query(Task).options(selectinload(Task.attachments)).all()

    def list_by_owner(self, user_id: int) -> List[Task]:
        return (
            self.db.query(Task)
            .options(selectinload(Task.attachments))
            .filter(Task.user_id == user_id)
            .all()
        )

    def get_by_id(self, task_id: int, user_id: int) -> Optional[Task]:
        return self._owned(task_id, user_id).options(selectinload(Task.attachments)).first()

    def create(self, title: str, user_id: int) -> Task:
        task = Task(title=title, user_id=user_id, status=False)
        self.db.add(task)
        self._commit()
        self.db.refresh(task)
        return task

    def update(self, task_id: int, user_id: int, changes: dict) -> Optional[Task]:
        """Apply ``changes`` to the owned task; ``None`` when there is no such task."""
        allowed = {k: v for k, v in changes.items() if k in ("title", "status")}
        if allowed:
            try:
                rows = self._owned(task_id, user_id).update(allowed, synchronize_session=False)
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                raise
            if rows == 0:
                return None
        self.db.expire_all()
        return self.get_by_id(task_id, user_id)

    def delete(self, task_id: int, user_id: int) -> int:
        """Delete the owned task and return the number of rows removed (0 or 1).

        The row is fetched first so that "absent" (0) stays separate from a
        failing database, which raises.
        """
        task = self._owned(task_id, user_id).first()
        if task is None:
            return 0
        self.db.delete(task)
        self._commit()
        return 1

    def create_attachment(self, task_id: int, user_id: int, path: str) -> Optional[Attachment]:
        """Reserve the next order number for the task and insert the attachment.

        The counter bump and the insert share one transaction, and the
        conditional UPDATE holds the task row until commit, so two concurrent
        uploads can never be handed the same order. Orders are not reused
        after an attachment is deleted. Returns ``None`` if the task is not
        owned by ``user_id``.
        """
        try:
            rows = self._owned(task_id, user_id).update(
                {Task.attachment_seq: Task.attachment_seq + 1},
                synchronize_session=False,
            )
            if rows == 0:
                self.db.rollback()
                return None
            order = (
                self.db.query(Task.attachment_seq)
                .filter(Task.id == task_id)
                .scalar()
            )
            logger.debug("Task %s reserved attachment order %s", task_id, order)
            attachment = Attachment(
                task_id=task_id,
                path=path,
                attachment_order=order,
                timestamp=datetime.now(UTC),
            )
            self.db.add(attachment)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(attachment)
        return attachment

    def replace_attachments(self, task: Task) -> None:
        """Write ``task.attachments`` back as the task's attachment rows.

        Runs as one transaction under the same row lock ``create_attachment``
        takes: all rows for the task are removed and re-inserted, keeping ids,
        orders and timestamps. Rows committed by someone else after the list
        was loaded are not in it; they are kept rather than dropped. Rows the
        caller removed from the collection are gone already, since the
        collection is flushed first.
        """
        try:
            rows = self._owned(task.id, task.user_id).update(
                {Task.attachment_seq: Task.attachment_seq},
                synchronize_session=False,
            )
            if rows == 0:
                self.db.rollback()
                return
            self.db.flush()
            merged = {
                a.id: {
                    "id": a.id,
                    "task_id": task.id,
                    "path": a.path,
                    "attachment_order": a.attachment_order,
                    "timestamp": a.timestamp or datetime.now(UTC),
                }
                for a in task.attachments
            }
            stored = self.db.execute(
                select(
                    Attachment.id,
                    Attachment.path,
                    Attachment.attachment_order,
                    Attachment.timestamp,
                ).where(Attachment.task_id == task.id)
            ).all()
            for row in stored:
                if row.id not in merged:
                    merged[row.id] = {
                        "id": row.id,
                        "task_id": task.id,
                        "path": row.path,
                        "attachment_order": row.attachment_order,
                        "timestamp": row.timestamp,
                    }
            self.db.execute(
                delete(Attachment)
                .where(Attachment.task_id == task.id)
                .execution_options(synchronize_session=False)
            )
            if merged:
                ordered = sorted(merged.values(), key=lambda r: r["attachment_order"])
                self.db.execute(insert(Attachment), ordered)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.expire_all()

    def save(self, task: Task) -> None:
        self.db.add(task)
        self._commit()

    def search_by_owner(
        self, user_id: int, search: str, page: int, per_page: int
    ) -> Tuple[List[Task], int]:
        """Substring match on title, one page at a time.

        Case sensitivity follows the backend's LIKE. ``total`` counts every
        match, not just the returned page.
        """
        query = self.db.query(Task).filter(
            Task.user_id == user_id, Task.title.like(f"%{search}%")
        )
        total = query.count()
        offset = (page - 1) * per_page
        items = (
            query.options(selectinload(Task.attachments))
            .order_by(Task.id)
            .offset(offset)
            .limit(per_page)
            .all()
        )
        return items, total

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
