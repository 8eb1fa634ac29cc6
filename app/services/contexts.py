"""
Shell context management.

A shell context is one logical machine: the host, or a container the user
has entered. Each context owns its own FileSystem built from its own seed,
so changes made inside a container never show up on the host or in
another container.

ShellSession ties a context stack to one ShellExecutor and re-binds the
executor to the top context before every command.
"""

import logging
import threading
from typing import List, Literal, Optional

from app.config import HOST_HOME, PROMPT_SYMBOL
from app.schemas.filesystem import FileSystemState
from app.schemas.results import ErrorKind, Result, failure, success
from app.schemas.shell import ContextInfo
from app.services.executor import ShellExecutor
from app.services.filesystem import FileSystem, StateInput
from app.services.seeds import debian_filesystem, host_filesystem

logger = logging.getLogger(__name__)


class ShellContext:
    """
    One shell target with its own filesystem.

    Host contexts have no pod/container names; container contexts carry
    the pod, container and namespace they were opened in.
    """

    def __init__(
        self,
        context_id: str,
        context_type: Literal["host", "container"],
        filesystem: FileSystem,
        home: str = "/",
        pod_name: Optional[str] = None,
        container_name: Optional[str] = None,
        namespace: Optional[str] = None
    ):
        self.id = context_id
        self.type = context_type
        self.filesystem = filesystem
        self.home = home
        self.pod_name = pod_name
        self.container_name = container_name
        self.namespace = namespace
        self.prompt = ""
        self.update_prompt()

    def update_prompt(self) -> str:
        """
        Recompute the prompt from the working directory.

        Host:      "☸ ~>" at home, "☸ ~<rel>>" below home, "☸ <path>>" elsewhere
        Container: "☸ [pod:container] />" at root, "☸ [pod:container] ~<rel>>" elsewhere
        """
        current_path = self.filesystem.get_current_path()

        if self.type == "host":
            if current_path == self.home:
                self.prompt = f"{PROMPT_SYMBOL} ~>"
            elif current_path.startswith(self.home + "/"):
                relative = current_path[len(self.home) + 1:]
                self.prompt = f"{PROMPT_SYMBOL} ~{relative}>"
            else:
                self.prompt = f"{PROMPT_SYMBOL} {current_path}>"
        else:
            label = f"[{self.pod_name}:{self.container_name}]"
            if current_path == "/":
                self.prompt = f"{PROMPT_SYMBOL} {label} />"
            else:
                self.prompt = f"{PROMPT_SYMBOL} {label} ~{current_path[1:]}>"

        return self.prompt

    def to_info(self) -> ContextInfo:
        return ContextInfo(
            id=self.id,
            type=self.type,
            pod_name=self.pod_name,
            container_name=self.container_name,
            namespace=self.namespace,
            prompt=self.prompt,
            current_path=self.filesystem.get_current_path()
        )


class ShellContextStack:
    """
    Stack of shell contexts with the host permanently at the bottom.

    Entering a container pushes a context, exiting pops it. The host
    context can never be popped.
    """

    def __init__(self, host_state: Optional[StateInput] = None, home: str = HOST_HOME):
        host_fs = FileSystem(host_state if host_state is not None else host_filesystem())
        self.contexts: List[ShellContext] = [
            ShellContext("host", "host", host_fs, home=home)
        ]

    def current(self) -> ShellContext:
        return self.contexts[-1]

    def get(self, context_id: str) -> Optional[ShellContext]:
        for context in self.contexts:
            if context.id == context_id:
                return context
        return None

    def push_container(
        self,
        pod_name: str,
        container_name: str,
        namespace: str = "default",
        state: Optional[StateInput] = None
    ) -> ShellContext:
        """
        Enter a container shell.

        Args:
            pod_name: Pod the container belongs to
            container_name: Container to open
            namespace: Pod namespace
            state: Container filesystem (default: fresh Debian layout)

        Returns:
            The new current context
        """
        filesystem = FileSystem(state if state is not None else debian_filesystem())
        context = ShellContext(
            f"container-{pod_name}-{container_name}",
            "container",
            filesystem,
            home="/",
            pod_name=pod_name,
            container_name=container_name,
            namespace=namespace
        )
        self.contexts.append(context)
        logger.info(f"Entered container {container_name} in pod {pod_name} ({namespace})")
        return context

    def pop(self) -> bool:
        """Leave the current container; False when already on the host"""
        if len(self.contexts) <= 1:
            return False

        context = self.contexts.pop()
        logger.info(f"Exited context {context.id}")
        return True

    def is_in_container(self) -> bool:
        return self.current().type == "container"

    def update_prompt(self) -> str:
        return self.current().update_prompt()


class ShellSession:
    """
    A terminal session: context stack plus executor.

    Commands are dispatched one at a time under a lock so a tree is never
    mutated by two commands at once.
    """

    def __init__(self, host_state: Optional[StateInput] = None):
        self._host_state = host_state
        self._lock = threading.RLock()
        self.stack = ShellContextStack(host_state)
        context = self.stack.current()
        self.executor = ShellExecutor(context.filesystem, home=context.home)

    def current(self) -> ShellContext:
        return self.stack.current()

    def execute(self, line: str) -> Result:
        """
        Run one command line in the current context.

        "exit" is handled here since it changes the context stack rather
        than a filesystem.
        """
        with self._lock:
            if line.strip() == "exit":
                exited = self.stack.pop()
                message = "Exited container" if exited else "Already in host shell"
                result = success(message)
            else:
                context = self.stack.current()
                self.executor.bind(context.filesystem, home=context.home)
                result = self.executor.execute(line)

            self.stack.update_prompt()
            return result

    def enter_container(
        self,
        pod_name: str,
        container_name: str,
        namespace: str = "default",
        state: Optional[StateInput] = None
    ) -> ShellContext:
        with self._lock:
            return self.stack.push_container(pod_name, container_name, namespace, state)

    def exit_container(self) -> Result:
        with self._lock:
            if not self.stack.pop():
                return failure(ErrorKind.INVALID_ARGUMENT, "Already in host shell")
            self.stack.update_prompt()
            return success(self.stack.current())

    def load_current(self, state: StateInput) -> FileSystemState:
        """Replace the current context's filesystem with a snapshot"""
        with self._lock:
            context = self.stack.current()
            context.filesystem.load_state(state)
            context.update_prompt()
            return context.filesystem.snapshot()

    def reset(self) -> None:
        """Drop every container and rebuild the host from its seed"""
        with self._lock:
            self.stack = ShellContextStack(self._host_state)
            context = self.stack.current()
            self.executor.bind(context.filesystem, home=context.home)
            logger.info("Shell session reset")


# Global shell session instance
shell_session = ShellSession()
