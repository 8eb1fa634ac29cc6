from typing import Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from app.schemas.results import ErrorKind


class ParsedCommand(BaseModel):
    """One parsed shell input line"""
    command: str
    args: List[str] = Field(default_factory=list)
    flags: Dict[str, Union[bool, str]] = Field(default_factory=dict)


class CommandRequest(BaseModel):
    """Shell command sent by a client"""
    command: str


class CommandResponse(BaseModel):
    """Result of a shell command plus the prompt to show next"""
    ok: bool
    output: Optional[str] = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    prompt: str
    context: str


class ContextInfo(BaseModel):
    """Shell context (host or container) as seen by clients"""
    id: str
    type: Literal["host", "container"]
    pod_name: Optional[str] = None
    container_name: Optional[str] = None
    namespace: Optional[str] = None
    prompt: str
    current_path: str


class EnterContainerRequest(BaseModel):
    """Request to open a shell inside a container"""
    pod_name: str
    container_name: str
    namespace: str = "default"
