"""Attachment upload workflow.

Ownership is checked first, then the file, then the bytes go to the selected
backend, and only then is the attachment row written. If the row cannot be
written the stored object is deleted again, so a failed upload leaves neither
metadata nor blob behind (unless the compensating delete fails too, which is
logged).
Once the row is committed the upload counts as done; a failure while
writing the attachment list back to the task is logged only.
"""

import logging
import os
import uuid
from typing import Optional

from fastapi import HTTPException, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError

from todo_api import config
from todo_api.models.task import Attachment
from todo_api.repository import TaskRepository
from todo_api.storage import BlobStorage, StorageError

logger = logging.getLogger(__name__)


class UploadRejected(Exception):
    pass


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def validate_upload(file: Optional[UploadFile]) -> str:
    """Return the extension of an acceptable upload or raise UploadRejected.

    Only the extension is checked; the content is not sniffed.
    """
    if file is None or not file.filename:
        raise UploadRejected("No File Upload")
    ext = file_extension(file.filename)
    if ext not in config.ALLOWED_UPLOAD_EXTENSIONS:
        raise UploadRejected("error File not allowed type")
    if file.size is not None and file.size > config.MAX_UPLOAD_BYTES:
        raise UploadRejected("File too large")
    return ext


def unique_key(ext: str) -> str:
    return f"{uuid.uuid4()}{ext}"


class AttachmentUploader:
    def __init__(self, repo: TaskRepository, storage: BlobStorage, resync: bool = False):
        # resync: push the whole attachment list back with replace_attachments
        # instead of a plain save once the new row exists
        self.repo = repo
        self.storage = storage
        self.resync = resync

    def upload(self, task_id: int, user_id: int, file: Optional[UploadFile]) -> Attachment:
        task = self.repo.get_by_id(task_id, user_id)
        if task is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")

        try:
            ext = validate_upload(file)
        except UploadRejected as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

        key = unique_key(ext)
        try:
            reference = self.storage.put_object(key, file.file, file.content_type)
        except StorageError:
            logger.exception("Storing %s via %s backend failed", key, self.storage.name)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to store file",
            )

        try:
            attachment = self.repo.create_attachment(task_id, user_id, reference)
        except SQLAlchemyError:
            logger.exception("Attachment row for task %s failed after storing %s", task_id, key)
            self._discard(key)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create attachment",
            )
        if attachment is None:
            # task vanished between the ownership check and the insert
            self._discard(key)
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")

        if attachment not in task.attachments:
            task.attachments.append(attachment)
        try:
            if self.resync:
                self.repo.replace_attachments(task)
            else:
                self.repo.save(task)
        except SQLAlchemyError:
            # the attachment row and the blob are both committed at this point
            logger.exception("Failed to update task %s with its attachments", task_id)

        logger.info(
            "Stored attachment %s (order %s) for task %s via %s backend",
            attachment.id, attachment.attachment_order, task_id, self.storage.name,
        )
        return attachment

    def _discard(self, key: str):
        try:
            self.storage.delete_object(key)
        except StorageError:
            logger.exception("Could not remove orphaned object %s", key)
