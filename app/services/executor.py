"""
Shell command executor.

Routes parsed commands to FileSystem operations through a fixed handler
table and turns engine results into shell-style output or error text.
The executor holds no filesystem of its own: it is bound to whichever
FileSystem the active shell context owns.
"""

import logging
from typing import Callable, Dict, List, Optional, Union

from app.schemas.results import ErrorKind, Failure, Result, failure, success
from app.services.filesystem import FileSystem
from app.services.log_buffer import LogBuffer, install_log_buffer
from app.services.parser import parse_shell_command

logger = logging.getLogger(__name__)

Flags = Dict[str, Union[bool, str]]
CommandHandler = Callable[[List[str], Flags], Result]

ERROR_REASONS: Dict[ErrorKind, str] = {
    ErrorKind.NOT_FOUND: "No such file or directory",
    ErrorKind.NOT_A_DIRECTORY: "Not a directory",
    ErrorKind.NOT_A_FILE: "Is a directory",
    ErrorKind.ALREADY_EXISTS: "File exists",
    ErrorKind.INVALID_NAME: "Invalid name",
    ErrorKind.UNSUPPORTED_EXTENSION: "Unsupported file extension",
    ErrorKind.MAX_DEPTH_EXCEEDED: "Maximum depth exceeded",
    ErrorKind.NOT_EMPTY: "Directory not empty",
    ErrorKind.CANNOT_DELETE_ROOT: "Cannot remove root directory",
}

HELP_TEXT = """Available shell commands:
  cd <path>         Change directory
  ls [path]         List directory contents
  ls -l [path]      List with details
  pwd               Print working directory
  mkdir <name>      Create directory
  mkdir -p <path>   Create directory and missing parents
  touch <file>      Create empty file
  cat <file>        Display file contents
  rm <file>         Remove file
  rm -r <dir>       Remove directory and its contents
  clear             Clear terminal
  help              Show this help
  debug logs        Show application logs
  debug clear       Clear application logs
  exit              Leave the current container shell"""

DEBUG_USAGE = """Debug commands:
  debug logs      Show application logs
  debug clear     Clear application logs

Usage: debug <subcommand>"""


class ShellExecutor:
    """
    Executes shell command lines against a bound FileSystem.

    Every command returns a Success with the text to print (possibly
    empty) or a Failure whose message is ready to show to the user.
    """

    def __init__(
        self,
        filesystem: FileSystem,
        home: str = "/",
        log_buffer: Optional[LogBuffer] = None
    ):
        self.filesystem = filesystem
        self.home = home
        self.log_buffer = log_buffer or install_log_buffer()

        # Command dispatch table
        self._handlers: Dict[str, CommandHandler] = {
            "pwd": self._cmd_pwd,
            "cd": self._cmd_cd,
            "ls": self._cmd_ls,
            "mkdir": self._cmd_mkdir,
            "touch": self._cmd_touch,
            "cat": self._cmd_cat,
            "rm": self._cmd_rm,
            "clear": self._cmd_clear,
            "help": self._cmd_help,
            "debug": self._cmd_debug,
        }

    @property
    def commands(self) -> List[str]:
        return list(self._handlers)

    def bind(self, filesystem: FileSystem, home: str = "/") -> None:
        """Point the executor at another filesystem (context switch)"""
        self.filesystem = filesystem
        self.home = home

    def execute(self, line: str) -> Result:
        """
        Parse and run one command line.

        Args:
            line: Raw input (e.g. "mkdir -p manifests/dev")

        Returns:
            Success with output text, or Failure with an error message
        """
        parsed = parse_shell_command(line)
        if not parsed.ok:
            logger.warning(f"Rejected input: {parsed.message}")
            return parsed

        command = parsed.value
        trimmed = line.strip()
        logger.info(f"Shell: {trimmed}")

        handler = self._handlers.get(command.command)
        if handler is None:
            message = f"Unknown command: {trimmed}"
            logger.error(message)
            return failure(ErrorKind.UNKNOWN_COMMAND, message)

        result = handler(command.args, command.flags)
        if not result.ok:
            logger.error(result.message)
        return result

    # === Formatting ===

    def _reason(self, kind: ErrorKind) -> str:
        if kind == ErrorKind.MAX_DEPTH_EXCEEDED:
            return f"Maximum depth of {self.filesystem.max_depth} exceeded"
        if kind == ErrorKind.UNSUPPORTED_EXTENSION:
            supported = ", ".join(self.filesystem.extensions)
            return f"Unsupported file extension (supported: {supported})"
        return ERROR_REASONS.get(kind, kind.value)

    def _error(self, template: str, operand: str, result: Failure) -> Failure:
        return failure(result.kind, template.format(operand=operand, reason=self._reason(result.kind)))

    # === Command handlers ===

    def _cmd_pwd(self, _args: List[str], _flags: Flags) -> Result:
        return success(self.filesystem.get_current_path())

    def _cmd_cd(self, args: List[str], _flags: Flags) -> Result:
        target = args[0] if args else self.home
        result = self.filesystem.change_directory(target)
        if not result.ok:
            return self._error("cd: {operand}: {reason}", target, result)
        return success("")

    def _cmd_ls(self, args: List[str], flags: Flags) -> Result:
        long_format = "l" in flags
        value = flags.get("l")
        target = value if isinstance(value, str) else (args[0] if args else None)

        result = self.filesystem.list_directory(target)
        if not result.ok:
            return self._error("ls: cannot access '{operand}': {reason}", target or ".", result)

        nodes = result.value
        if not long_format:
            return success("  ".join(node.name for node in nodes))

        lines = []
        for node in nodes:
            if node.type == "directory":
                lines.append(f"d  {node.name}/")
            else:
                lines.append(f"-  {node.name}")
        return success("\n".join(lines))

    def _cmd_mkdir(self, args: List[str], flags: Flags) -> Result:
        value = flags.get("p")
        recursive = "p" in flags
        target = value if isinstance(value, str) else (args[0] if args else None)

        if not target:
            return failure(ErrorKind.MISSING_OPERAND, "mkdir: missing operand")

        logger.info(f"Creating directory {target}{' (recursive)' if recursive else ''}")
        result = self.filesystem.create_directory(target, recursive=recursive)
        if not result.ok:
            return self._error("mkdir: cannot create directory '{operand}': {reason}", target, result)
        return success("")

    def _cmd_touch(self, args: List[str], _flags: Flags) -> Result:
        if not args:
            return failure(ErrorKind.MISSING_OPERAND, "touch: missing file operand")

        target = args[0]
        logger.info(f"Creating file {target}")
        result = self.filesystem.create_file(target)
        if not result.ok:
            return self._error("touch: cannot touch '{operand}': {reason}", target, result)
        return success("")

    def _cmd_cat(self, args: List[str], _flags: Flags) -> Result:
        if not args:
            return failure(ErrorKind.MISSING_OPERAND, "cat: missing file operand")

        target = args[0]
        result = self.filesystem.read_file(target)
        if not result.ok:
            return self._error("cat: {operand}: {reason}", target, result)
        return success(result.value)

    def _cmd_rm(self, args: List[str], flags: Flags) -> Result:
        value = flags.get("r")
        recursive = "r" in flags
        target = value if isinstance(value, str) else (args[0] if args else None)

        if not target:
            return failure(ErrorKind.MISSING_OPERAND, "rm: missing operand")

        if recursive:
            logger.info(f"Removing directory {target}")
            result = self.filesystem.delete_directory(target, recursive=True)
            if not result.ok and result.kind == ErrorKind.NOT_A_DIRECTORY:
                result = self.filesystem.delete_file(target)
        else:
            logger.info(f"Removing file {target}")
            result = self.filesystem.delete_file(target)

        if not result.ok:
            return self._error("rm: cannot remove '{operand}': {reason}", target, result)
        return success("")

    def _cmd_clear(self, _args: List[str], _flags: Flags) -> Result:
        # The terminal clears itself on empty output
        return success("")

    def _cmd_help(self, _args: List[str], _flags: Flags) -> Result:
        return success(HELP_TEXT)

    def _cmd_debug(self, args: List[str], _flags: Flags) -> Result:
        if not args:
            return success(DEBUG_USAGE)

        subcommand = args[0]
        if subcommand == "logs":
            entries = self.log_buffer.entries()
            lines = ["=== Application Logs ===", ""]
            lines.extend(entries or ["(no log entries)"])
            return success("\n".join(lines))

        if subcommand == "clear":
            self.log_buffer.clear()
            return success("Application logs cleared")

        return failure(ErrorKind.INVALID_ARGUMENT, f"Unknown debug subcommand: {subcommand}")
