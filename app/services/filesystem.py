"""
Virtual filesystem engine.

A FileSystem owns one directory tree and a working directory. Every
operation resolves its path argument against the working directory,
validates the whole request first and only then mutates the tree, so a
failed operation never leaves partial changes behind.

Operations return Success/Failure values instead of raising; callers
(the shell executor, the HTTP routers) turn failures into text.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union, cast

from app.config import MAX_DEPTH, SUPPORTED_EXTENSIONS
from app.schemas.filesystem import (
    DirectoryNode, FileSystemNode, FileSystemState,
    create_directory, create_file, get_file_extension, is_valid_extension, replace_content
)
from app.schemas.results import ErrorKind, Result, failure, success
from app.services.paths import (
    get_depth, is_within, join_path, normalize_path, resolve_path,
    split_path, split_segments, validate_filename
)

logger = logging.getLogger(__name__)

StateInput = Union[FileSystemState, Dict[str, Any]]


def find_node(tree: DirectoryNode, path: str) -> Optional[FileSystemNode]:
    """
    Find a node by absolute path.

    Args:
        tree: Root directory
        path: Normalized absolute path

    Returns:
        The node, or None if any segment is missing or crosses a file
    """
    current: FileSystemNode = tree
    for part in split_segments(path):
        if current.type != "directory":
            return None
        child = current.children.get(part)
        if child is None:
            return None
        current = child
    return current


def copy_state(state: StateInput, max_depth: int = MAX_DEPTH) -> FileSystemState:
    """
    Build an independent FileSystemState from a model or its plain form.

    The input is dumped and validated again so the result shares no node
    with it. Validation also checks the tree structure against max_depth.

    Raises:
        pydantic.ValidationError: If the state is malformed or inconsistent
    """
    if isinstance(state, FileSystemState):
        state = state.model_dump(by_alias=True)
    return FileSystemState.model_validate(state, context={"max_depth": max_depth})


def _names_valid(raw: str) -> bool:
    parts = [part for part in split_segments(raw) if part not in (".", "..")]
    return bool(parts) and all(validate_filename(part) for part in parts)


class FileSystem:
    """
    In-memory directory tree with a working directory.

    Each instance is independent: it is built from its own copy of the
    seed state and never shares nodes with another instance.
    """

    def __init__(
        self,
        state: Optional[StateInput] = None,
        extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
        max_depth: int = MAX_DEPTH
    ):
        self.extensions: Tuple[str, ...] = tuple(extensions)
        self.max_depth = max_depth
        self._state = FileSystemState(current_path="/", tree=create_directory("root", "/"))
        if state is not None:
            self.load_state(state)

    @property
    def tree(self) -> DirectoryNode:
        return self._state.tree

    def _resolve(self, path: str) -> str:
        return resolve_path(self._state.current_path, path)

    def _lookup_directory(self, path: str) -> Result:
        node = find_node(self.tree, path)
        if node is None:
            return failure(ErrorKind.NOT_FOUND, f"Directory not found: {path}")
        if node.type != "directory":
            return failure(ErrorKind.NOT_A_DIRECTORY, f"Not a directory: {path}")
        return success(node)

    def _lookup_file(self, path: str) -> Result:
        node = find_node(self.tree, path)
        if node is None:
            return failure(ErrorKind.NOT_FOUND, f"File not found: {path}")
        if node.type != "file":
            return failure(ErrorKind.NOT_A_FILE, f"Not a file: {path}")
        return success(node)

    def _locate_child(self, path: str) -> Tuple[DirectoryNode, str]:
        """Parent directory and child key of a path already known to exist"""
        parent_path, child_name = split_path(path)
        return cast(DirectoryNode, find_node(self.tree, parent_path)), child_name

    # === Navigation ===

    def get_current_path(self) -> str:
        return self._state.current_path

    def change_directory(self, path: str) -> Result:
        absolute = self._resolve(path)
        result = self._lookup_directory(absolute)
        if not result.ok:
            return result

        self._state.current_path = absolute
        logger.debug(f"Changed directory to {absolute}")
        return success(absolute)

    def list_directory(self, path: Optional[str] = None) -> Result:
        """
        List the children of a directory in insertion order.

        Args:
            path: Directory to list (default: working directory)

        Returns:
            Success with a list of nodes
        """
        target = self._resolve(path) if path else self._state.current_path
        result = self._lookup_directory(target)
        if not result.ok:
            return result
        return success(list(result.value.children.values()))

    # === Directories ===

    def create_directory(self, name: str, recursive: bool = False) -> Result:
        """
        Create a directory.

        With recursive=True every missing ancestor is created as well
        (mkdir -p). The full target path is checked against the depth
        bound before anything is inserted.

        Args:
            name: Absolute or relative path of the new directory
            recursive: Create missing ancestors

        Returns:
            Success with the absolute path of the new directory
        """
        absolute = self._resolve(name)

        if absolute == "/" or not _names_valid(name):
            return failure(ErrorKind.INVALID_NAME, f"Invalid directory name: {name}")

        if get_depth(absolute) > self.max_depth:
            return failure(
                ErrorKind.MAX_DEPTH_EXCEEDED,
                f"Max depth of {self.max_depth} exceeded: {absolute}"
            )

        if find_node(self.tree, absolute) is not None:
            return failure(ErrorKind.ALREADY_EXISTS, f"Directory already exists: {absolute}")

        parts = split_segments(absolute)
        parent: DirectoryNode = self.tree
        current_path = "/"
        missing: List[Tuple[str, str]] = []

        for part in parts[:-1]:
            current_path = join_path(current_path, part)
            if missing:
                missing.append((part, current_path))
                continue

            child = parent.children.get(part)
            if child is None:
                if not recursive:
                    return failure(ErrorKind.NOT_FOUND, f"Parent directory not found: {current_path}")
                missing.append((part, current_path))
            elif child.type != "directory":
                return failure(ErrorKind.NOT_A_DIRECTORY, f"Not a directory: {current_path}")
            else:
                parent = child

        missing.append((parts[-1], absolute))

        for part, path in missing:
            directory = create_directory(part, path)
            parent.children[part] = directory
            parent = directory

        logger.info(f"Created directory {absolute}")
        return success(absolute)

    def delete_directory(self, path: str, recursive: bool = False) -> Result:
        absolute = self._resolve(path)

        if absolute == "/":
            return failure(ErrorKind.CANNOT_DELETE_ROOT, "Cannot delete root directory")

        result = self._lookup_directory(absolute)
        if not result.ok:
            return result

        if not recursive and result.value.children:
            return failure(ErrorKind.NOT_EMPTY, f"Directory not empty: {absolute}")

        parent, dir_name = self._locate_child(absolute)
        del parent.children[dir_name]

        if is_within(self._state.current_path, absolute):
            self._state.current_path = split_path(absolute)[0]

        logger.info(f"Deleted directory {absolute}")
        return success()

    # === Files ===

    def create_file(self, name: str, content: str = "") -> Result:
        """
        Create a file in an existing directory.

        Files do not count towards depth themselves: the parent directory
        must sit within the depth bound.

        Args:
            name: Absolute or relative path of the new file
            content: Initial content

        Returns:
            Success with the created FileNode
        """
        absolute = self._resolve(name)
        parent_path, filename = split_path(absolute)

        if not filename or not _names_valid(name):
            return failure(ErrorKind.INVALID_NAME, f"Invalid filename: {name}")

        if get_depth(parent_path) > self.max_depth:
            return failure(
                ErrorKind.MAX_DEPTH_EXCEEDED,
                f"Max depth of {self.max_depth} exceeded: {absolute}"
            )

        if find_node(self.tree, absolute) is not None:
            return failure(ErrorKind.ALREADY_EXISTS, f"File already exists: {absolute}")

        extension = get_file_extension(filename)
        if not is_valid_extension(extension, self.extensions):
            return failure(
                ErrorKind.UNSUPPORTED_EXTENSION,
                f"Unsupported file extension: {extension or '(none)'}"
            )

        parent = self._lookup_directory(parent_path)
        if not parent.ok:
            return parent

        file = create_file(filename, absolute, content, self.extensions)
        parent.value.children[filename] = file

        logger.info(f"Created file {absolute}")
        return success(file.model_copy())

    def read_file(self, path: str) -> Result:
        absolute = self._resolve(path)
        result = self._lookup_file(absolute)
        if not result.ok:
            return result
        return success(result.value.content)

    def write_file(self, path: str, content: str) -> Result:
        """Replace a file's content, keeping its creation time"""
        absolute = self._resolve(path)
        result = self._lookup_file(absolute)
        if not result.ok:
            return result

        parent, file_name = self._locate_child(absolute)
        parent.children[file_name] = replace_content(result.value, content)

        logger.info(f"Wrote {len(content)} characters to {absolute}")
        return success()

    def delete_file(self, path: str) -> Result:
        absolute = self._resolve(path)
        result = self._lookup_file(absolute)
        if not result.ok:
            return result

        parent, file_name = self._locate_child(absolute)
        del parent.children[file_name]

        logger.info(f"Deleted file {absolute}")
        return success()

    # === Snapshot / restore ===

    def to_json(self) -> Dict[str, Any]:
        """
        Serialize the filesystem to plain data.

        Returns:
            {"currentPath": str, "tree": {...}} with nested children maps
            and ISO-8601 timestamps
        """
        return self._state.model_dump(mode="json", by_alias=True)

    def snapshot(self) -> FileSystemState:
        return copy_state(self._state, self.max_depth)

    def load_state(self, state: StateInput) -> None:
        """
        Replace the whole filesystem with a copy of a snapshot.

        Args:
            state: FileSystemState or its plain dict form

        Raises:
            pydantic.ValidationError: If the snapshot is malformed, a child is
                stored under another name, a path does not match its location,
                a name is invalid or a directory exceeds max_depth
        """
        new_state = copy_state(state, self.max_depth)
        current_path = normalize_path(new_state.current_path)

        node = find_node(new_state.tree, current_path)
        if node is None or node.type != "directory":
            logger.warning(f"Snapshot working directory {current_path} missing, using /")
            current_path = "/"

        new_state.current_path = current_path
        self._state = new_state
        logger.debug(f"Loaded filesystem state at {current_path}")
