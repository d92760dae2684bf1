import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from todo_api.schemas.task import AttachmentOut
from todo_api.services.uploads import AttachmentUploader, UploadRejected, unique_key, validate_upload
from todo_api.storage import BlobStorage, StorageError, get_local_storage, get_s3_storage
from todo_api.repository import TaskRepository
from todo_api.routers.tasks import get_repository
from todo_api.dependencies import get_current_user, require_api_key, CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])


@router.post("/uploadS3/{task_id}")
def upload_s3(
    task_id: int,
    file: Optional[UploadFile] = File(None),
    current: CurrentUser = Depends(get_current_user),
    repo: TaskRepository = Depends(get_repository),
    storage: BlobStorage = Depends(get_s3_storage),
):
    uploader = AttachmentUploader(repo, storage, resync=True)
    attachment = uploader.upload(task_id, current.user_id, file)
    return {
        "status": 200,
        "message": "File uploaded and attachment created successfully",
        "data": AttachmentOut.model_validate(attachment),
    }

@router.post("/uploadLocal/{task_id}")
def upload_local(
    task_id: int,
    file: Optional[UploadFile] = File(None),
    current: CurrentUser = Depends(get_current_user),
    repo: TaskRepository = Depends(get_repository),
    storage: BlobStorage = Depends(get_local_storage),
):
    uploader = AttachmentUploader(repo, storage)
    attachment = uploader.upload(task_id, current.user_id, file)
    return {
        "status": 200,
        "message": "File uploaded and attachment created successfully",
        "data": AttachmentOut.model_validate(attachment),
    }

@router.post("/uploadBuckets", dependencies=[Depends(require_api_key)])
def upload_bucket(
    file: Optional[UploadFile] = File(None),
    storage: BlobStorage = Depends(get_s3_storage),
):
    try:
        ext = validate_upload(file)
    except UploadRejected as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    key = unique_key(ext)
    try:
        url = storage.put_object(key, file.file, file.content_type)
    except StorageError:
        logger.exception("Failed to upload %s to object storage", key)
        raise HTTPException(status_code=500, detail="Failed to upload file to S3")
    return {"message": "File uploaded to S3 successfully", "url": url}
