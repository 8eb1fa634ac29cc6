from enum import Enum
from typing import Any, Literal, Union
from pydantic import BaseModel


class ErrorKind(str, Enum):
    """Failure categories reported by the filesystem engine and the shell"""
    NOT_FOUND = "NotFound"
    NOT_A_DIRECTORY = "NotADirectory"
    NOT_A_FILE = "NotAFile"
    ALREADY_EXISTS = "AlreadyExists"
    INVALID_NAME = "InvalidName"
    UNSUPPORTED_EXTENSION = "UnsupportedExtension"
    MAX_DEPTH_EXCEEDED = "MaxDepthExceeded"
    NOT_EMPTY = "NotEmpty"
    CANNOT_DELETE_ROOT = "CannotDeleteRoot"
    EMPTY_COMMAND = "EmptyCommand"
    UNKNOWN_COMMAND = "UnknownCommand"
    MISSING_OPERAND = "MissingOperand"
    INVALID_ARGUMENT = "InvalidArgument"


class Success(BaseModel):
    """Successful operation carrying its value"""
    ok: Literal[True] = True
    value: Any = None


class Failure(BaseModel):
    """Failed operation: what kind of failure and a readable message"""
    ok: Literal[False] = False
    kind: ErrorKind
    message: str


Result = Union[Success, Failure]


def success(value: Any = None) -> Success:
    return Success(value=value)


def failure(kind: ErrorKind, message: str) -> Failure:
    return Failure(kind=kind, message=message)
