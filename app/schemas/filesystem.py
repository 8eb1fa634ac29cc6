from datetime import datetime, timezone
from typing import Annotated, Dict, Iterable, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, model_validator

from app.config import MAX_DEPTH, SUPPORTED_EXTENSIONS
from app.services.paths import get_depth, join_path, validate_filename


class UnsupportedExtensionError(ValueError):
    """Raised when a file name carries an extension outside the allow-list"""

    def __init__(self, extension: str):
        super().__init__(f"Unsupported file extension: {extension or '(none)'}")
        self.extension = extension


class FileNode(BaseModel):
    """File in the virtual filesystem"""
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["file"] = "file"
    name: str
    path: str
    content: str = ""
    extension: str = ""
    created_at: datetime = Field(alias="createdAt")
    modified_at: datetime = Field(alias="modifiedAt")


class DirectoryNode(BaseModel):
    """Directory in the virtual filesystem, children keyed by name in insertion order"""
    type: Literal["directory"] = "directory"
    name: str
    path: str
    children: Dict[str, "FileSystemNode"] = Field(default_factory=dict)


FileSystemNode = Annotated[Union[DirectoryNode, FileNode], Field(discriminator="type")]

DirectoryNode.model_rebuild()


def check_tree(directory: DirectoryNode, max_depth: int = MAX_DEPTH) -> None:
    """
    Check the structure of a directory tree.

    Every child must be stored under its own name, carry a valid name and
    the path of its parent joined with that name, and no directory may sit
    deeper than max_depth.

    Raises:
        ValueError: On the first inconsistency found
    """
    if get_depth(directory.path) > max_depth:
        raise ValueError(f"Directory {directory.path} exceeds maximum depth of {max_depth}")

    for key, child in directory.children.items():
        if child.name != key:
            raise ValueError(f"Node {child.path} is stored under key '{key}' but named '{child.name}'")
        if not validate_filename(child.name):
            raise ValueError(f"Invalid node name: '{child.name}'")

        expected = join_path(directory.path, child.name)
        if child.path != expected:
            raise ValueError(f"Node path {child.path} does not match its location {expected}")

        if child.type == "directory":
            check_tree(child, max_depth)


class FileSystemState(BaseModel):
    """
    Complete filesystem: root directory plus the working directory.

    The tree is checked on validation. The depth bound defaults to
    MAX_DEPTH and can be overridden with a "max_depth" validation context.
    """
    model_config = ConfigDict(populate_by_name=True)

    current_path: str = Field(default="/", alias="currentPath")
    tree: DirectoryNode

    @model_validator(mode="after")
    def validate_tree(self, info: ValidationInfo) -> "FileSystemState":
        max_depth = MAX_DEPTH
        if info.context and "max_depth" in info.context:
            max_depth = info.context["max_depth"]

        if self.tree.path != "/":
            raise ValueError(f"Root directory must have path '/', got {self.tree.path}")
        check_tree(self.tree, max_depth)
        return self


def get_file_extension(filename: str) -> str:
    """
    Extract the extension of the last path segment, dot included.

    Names without a dot, or whose only dot is the leading one (".env"),
    have no extension and yield an empty string.
    """
    name = filename.split("/")[-1]
    last_dot = name.rfind(".")
    if last_dot <= 0:
        return ""
    return name[last_dot:]


def is_valid_extension(extension: str, extensions: Iterable[str] = SUPPORTED_EXTENSIONS) -> bool:
    return extension in tuple(extensions)


def create_directory(name: str, path: str) -> DirectoryNode:
    return DirectoryNode(name=name, path=path)


def create_file(
    name: str,
    path: str,
    content: str = "",
    extensions: Iterable[str] = SUPPORTED_EXTENSIONS
) -> FileNode:
    """
    Create a file node with fresh timestamps.

    Args:
        name: File name (last path segment)
        path: Absolute path of the file
        content: Initial text content
        extensions: Allowed extensions

    Returns:
        FileNode

    Raises:
        UnsupportedExtensionError: If the extension is not allowed
    """
    extension = get_file_extension(name)
    if not is_valid_extension(extension, extensions):
        raise UnsupportedExtensionError(extension)

    now = datetime.now(timezone.utc)
    return FileNode(
        name=name,
        path=path,
        content=content,
        extension=extension,
        created_at=now,
        modified_at=now
    )


def replace_content(file: FileNode, content: str) -> FileNode:
    """Return a copy of a file with new content and a refreshed modification time"""
    return file.model_copy(update={
        "content": content,
        "modified_at": datetime.now(timezone.utc)
    })
