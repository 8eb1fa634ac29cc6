from fastapi import APIRouter, HTTPException

from app.schemas.filesystem import FileSystemState
from app.services.contexts import shell_session

router = APIRouter(prefix="/api/filesystem", tags=["filesystem"])


@router.get("", response_model=FileSystemState)
async def get_filesystem():
    """
    Snapshot of the current context's filesystem
    """
    return shell_session.current().filesystem.snapshot()


@router.put("", response_model=FileSystemState)
async def replace_filesystem(state: FileSystemState):
    """
    Replace the current context's filesystem with a snapshot
    """
    return shell_session.load_current(state)


@router.get("/{context_id}", response_model=FileSystemState)
async def get_context_filesystem(context_id: str):
    """
    Snapshot of a specific context's filesystem
    """
    context = shell_session.stack.get(context_id)
    if context is None:
        raise HTTPException(status_code=404, detail="Context not found")

    return context.filesystem.snapshot()
