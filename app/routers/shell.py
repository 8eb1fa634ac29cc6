from fastapi import APIRouter, HTTPException

from app.schemas.shell import CommandRequest, CommandResponse, ContextInfo, EnterContainerRequest
from app.services.contexts import shell_session

router = APIRouter(prefix="/api/shell", tags=["shell"])


@router.post("/execute", response_model=CommandResponse)
async def execute_command(request: CommandRequest):
    """
    Run one shell command in the current context.

    Command failures are reported in the body (ok=false), not as HTTP errors.
    """
    result = shell_session.execute(request.command)
    context = shell_session.current()

    if result.ok:
        return CommandResponse(
            ok=True,
            output=result.value,
            prompt=context.prompt,
            context=context.id
        )

    return CommandResponse(
        ok=False,
        error=result.message,
        kind=result.kind,
        prompt=context.prompt,
        context=context.id
    )


@router.get("/contexts", response_model=list[ContextInfo])
async def list_contexts():
    """List shell contexts from the host (first) to the current one (last)"""
    return [context.to_info() for context in shell_session.stack.contexts]


@router.post("/contexts", response_model=ContextInfo)
async def enter_container(request: EnterContainerRequest):
    """Open a shell in a container with a fresh Debian filesystem"""
    context = shell_session.enter_container(
        request.pod_name,
        request.container_name,
        request.namespace
    )
    return context.to_info()


@router.delete("/contexts/current", response_model=ContextInfo)
async def exit_container():
    """Leave the current container and return to the previous context"""
    result = shell_session.exit_container()
    if not result.ok:
        raise HTTPException(status_code=409, detail=result.message)
    return result.value.to_info()


@router.post("/reset", response_model=ContextInfo)
async def reset_session():
    """Drop all containers and restore the host filesystem seed"""
    shell_session.reset()
    return shell_session.current().to_info()
