import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from math import ceil
from todo_api.schemas.task import TaskCreate, TaskUpdate, TaskOut
from todo_api.repository import TaskRepository
from todo_api.dependencies import get_current_user, CurrentUser
from todo_api.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def get_repository(db: Session = Depends(get_db)) -> TaskRepository:
    return TaskRepository(db)


@router.get("/manage-todos")
def list_tasks(current: CurrentUser = Depends(get_current_user), repo: TaskRepository = Depends(get_repository)):
    todos = repo.list_by_owner(current.user_id)
    return {
        "message": "Success Get All",
        "user_id": current.user_id,
        "data": len(todos),
        "todos": [TaskOut.model_validate(t) for t in todos],
    }

@router.post("/manage-todo")
def create_task(task: TaskCreate, current: CurrentUser = Depends(get_current_user), repo: TaskRepository = Depends(get_repository)):
    new = repo.create(task.title, current.user_id)
    logger.info("Task %s created for user %s", new.id, current.user_id)
    return {"status": 200, "message": "New Todo Created", "data": TaskOut.model_validate(new)}

@router.get("/manage-todo/todo/{task_id}")
def get_task(task_id: int, current: CurrentUser = Depends(get_current_user), repo: TaskRepository = Depends(get_repository)):
    task = repo.get_by_id(task_id, current.user_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return {"status": 200, "message": "Success Get Id", "data": TaskOut.model_validate(task)}

@router.put("/manage-todo/todo/{task_id}")
def update_task(task_id: int, body: TaskUpdate, current: CurrentUser = Depends(get_current_user), repo: TaskRepository = Depends(get_repository)):
    task = repo.update(task_id, current.user_id, body.changes())
    if task is None:
        raise HTTPException(status_code=404, detail="ID not Found")
    return {"status": 200, "message": "Success Update Todo", "data": TaskOut.model_validate(task)}

@router.delete("/manage-todo/todo/{task_id}")
def delete_task(task_id: int, current: CurrentUser = Depends(get_current_user), repo: TaskRepository = Depends(get_repository)):
    if repo.delete(task_id, current.user_id) == 0:
        raise HTTPException(status_code=404, detail="Not Found")
    logger.info("Task %s deleted by user %s", task_id, current.user_id)
    return {"status": 200, "message": "Success Delete"}

@router.get("/list-Search")
def search_tasks(
    search: str = Query("", description="Search by title"),
    page: int = 1,
    per_page: int = 10,
    current: CurrentUser = Depends(get_current_user),
    repo: TaskRepository = Depends(get_repository),
):
    # normalize page/per_page
    if page < 1:
        page = 1
    if per_page < 1:
        per_page = 10
    items, total = repo.search_by_owner(current.user_id, search, page, per_page)
    pages = ceil(total / per_page) if total > 0 else 1
    return {
        "status": 200,
        "data": [TaskOut.model_validate(t) for t in items],
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": pages,
    }
