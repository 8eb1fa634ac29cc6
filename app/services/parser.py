"""
Shell command parser.

Turns one input line into a ParsedCommand: the command name, positional
arguments and flags. Which flags take a value is decided per command by
VALUE_FLAGS; every other flag is boolean.

Command names are not checked here, the executor rejects unknown ones.
"""

import re
from typing import Dict, FrozenSet, List, Union

from app.schemas.results import ErrorKind, Result, failure, success
from app.schemas.shell import ParsedCommand

# Flags whose following token is consumed as their value
VALUE_FLAGS: Dict[str, FrozenSet[str]] = {
    "mkdir": frozenset({"p"}),
    "rm": frozenset({"r"}),
    "ls": frozenset({"l"}),
}

SHORT_FLAG = re.compile(r"-([A-Za-z])")
FLAG_START = re.compile(r"--?[A-Za-z]")


def tokenize(line: str) -> List[str]:
    return line.split()


def parse_shell_command(line: str) -> Result:
    """
    Parse a shell command line.

    Args:
        line: Raw input (e.g. "ls -l /etc", "mkdir -p dev/test")

    Returns:
        Success with a ParsedCommand, or Failure(EMPTY_COMMAND) for blank input

    Example:
        "mkdir -p dev/test" -> command="mkdir", args=[], flags={"p": "dev/test"}
        "ls -l"             -> command="ls", args=[], flags={"l": True}
    """
    tokens = tokenize(line)
    if not tokens:
        return failure(ErrorKind.EMPTY_COMMAND, "Command cannot be empty")

    command, rest = tokens[0], tokens[1:]
    value_flags = VALUE_FLAGS.get(command, frozenset())

    args: List[str] = []
    flags: Dict[str, Union[str, bool]] = {}

    i = 0
    while i < len(rest):
        token = rest[i]

        # A flag starts with a dash followed by a letter ("-1", "--" stay positional)
        if not FLAG_START.match(token):
            args.append(token)
            i += 1
            continue

        match = SHORT_FLAG.fullmatch(token)
        if match is None:
            # Long or grouped flags ("--all", "-la") are kept as booleans
            flags[token.lstrip("-")] = True
            i += 1
            continue

        name = match.group(1)
        next_token = rest[i + 1] if i + 1 < len(rest) else None

        if name in value_flags and next_token is not None and not FLAG_START.match(next_token):
            flags[name] = next_token
            i += 2
        else:
            flags[name] = True
            i += 1

    return success(ParsedCommand(command=command, args=args, flags=flags))
