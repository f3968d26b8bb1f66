"""Command dispatch: placeholder substitution and fire-and-forget shell execution."""

import asyncio
import logging

from filetrigger.errors import CommandExecutionError
from filetrigger.models import FILE_PLACEHOLDER
from filetrigger.notifier import FileTriggerNotifier, NoOpNotifier

logger = logging.getLogger(__name__)

# Max characters of stderr carried into an error report
_STDERR_LIMIT = 500


def render_command(template: str, file_path: str) -> str:
    """Replace every ${file} in template with file_path.

    The path is inserted literally, without shell quoting. Callers own the
    safety of both the template and the path.
    """
    return template.replace(FILE_PLACEHOLDER, file_path)


class CommandDispatcher:
    """Runs rendered commands through the system shell on the event loop.

    dispatch() never blocks and never raises on command failure: failures are
    logged and reported once through the notifier. Running commands are not
    cancelled when watchers stop.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        notifier: FileTriggerNotifier | None = None,
    ):
        """Initialize dispatcher.

        Args:
            loop: Event loop the subprocess tasks run on
            notifier: Where failures are reported (defaults to NoOpNotifier)
        """
        self.loop = loop
        self.notifier = notifier or NoOpNotifier()
        self._tasks: set[asyncio.Task] = set()

    def dispatch(self, template: str, file_path: str) -> asyncio.Task:
        """Render template for file_path and start it in the background.

        Returns:
            The background task. Callers on the firing path must not await it.
        """
        command = render_command(template, file_path)
        logger.info(f"Dispatching: {command}")
        task = self.loop.create_task(self._run(command))
        # Hold a reference until done so the task is not garbage collected
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, command: str) -> int | None:
        try:
            await self.execute(command)
        except CommandExecutionError as e:
            logger.error(f"Command failed: {e}")
            self.notifier.error(f"Command failed: {e}")
            return e.returncode
        return 0

    async def execute(self, command: str) -> None:
        """Run command to completion.

        Raises:
            CommandExecutionError: If the shell cannot be spawned or the command exits non-zero
        """
        try:
            proc = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            raise CommandExecutionError(command, None, str(e)) from e

        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip()[:_STDERR_LIMIT] if stderr else ""
            raise CommandExecutionError(command, proc.returncode, detail)
        logger.debug(f"Command finished: {command}")

    @property
    def pending(self) -> int:
        """Number of dispatched commands still running."""
        return len(self._tasks)

    async def aclose(self, timeout: float = 5.0) -> None:
        """Wait for in-flight commands to finish, up to timeout seconds."""
        if not self._tasks:
            return
        done, still_running = await asyncio.wait(list(self._tasks), timeout=timeout)
        if still_running:
            logger.warning(f"{len(still_running)} command(s) still running after {timeout}s")
