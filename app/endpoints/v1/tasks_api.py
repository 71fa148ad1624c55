from fastapi import APIRouter, Depends

from app.constants import SuccessMessages
from app.schemas import TaskCreate, TaskUpdate, TaskStatusUpdate
from app.utils import task_service
from app.utils.deps import APIContext
from app.utils.serializers import task_to_dict

router = APIRouter(prefix="/tasks", tags=["Tasks"])

@router.get("")
def get_tasks(ctx: APIContext = Depends()):
    """
    Lists the tasks visible to the caller, newest first.
    Employees only see tasks assigned to them.
    """
    return {"tasks": [task_to_dict(task) for task in task_service.list_tasks(ctx.db, ctx.user)]}

@router.get("/{task_id}")
def get_task(task_id: int, ctx: APIContext = Depends()):
    return {"task": task_to_dict(task_service.get_task(ctx.db, ctx.user, task_id))}

@router.post("", status_code=201)
def create_task(data: TaskCreate, ctx: APIContext = Depends()):
    """
    Creates a task with its assignees.
    Restricted to Admins and Managers.
    """
    return {"task": task_to_dict(task_service.create_task(ctx.db, ctx.user, data))}

@router.put("/{task_id}")
def update_task(task_id: int, data: TaskUpdate, ctx: APIContext = Depends()):
    return {"task": task_to_dict(task_service.update_task(ctx.db, ctx.user, task_id, data))}

@router.patch("/{task_id}/status")
def update_task_status(task_id: int, data: TaskStatusUpdate, ctx: APIContext = Depends()):
    """
    Changes only the status.
    Employees may do this on tasks where they are the primary assignee.
    """
    return {"task": task_to_dict(task_service.update_task_status(ctx.db, ctx.user, task_id, data))}

@router.delete("/{task_id}")
def delete_task(task_id: int, ctx: APIContext = Depends()):
    task_service.delete_task(ctx.db, ctx.user, task_id)
    return {"message": SuccessMessages.TASK_DELETED}
