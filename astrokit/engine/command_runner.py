"""Command runner for package-manager and generator invocations"""

import json
import logging
import os
import re
import signal
import subprocess
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console

from astrokit.exceptions import CommandError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300


@dataclass
class ExecutionResult:
    """Result from a single command execution"""
    command: str
    cwd: str
    exit_code: int
    stdout: str
    stderr: str
    error: Optional[str] = None


class CommandRunner:
    """Run shell commands synchronously with a timeout

    One child process per call. Output is either captured (silent) or
    streamed to the controlling terminal.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_delay: float = 1.0,
        log_dir: Optional[Path] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """Initialize command runner

        Args:
            console: Console used to announce commands
            timeout: Default timeout in seconds (overridable per call)
            retry_delay: Base backoff for run_with_retry, scaled by attempt index
            log_dir: Directory for per-command execution logs (None disables)
            sleep: Sleep function used between retry attempts
        """
        self.console = console or Console()
        self.timeout = timeout
        self.retry_delay = retry_delay
        self.log_dir = Path(log_dir) if log_dir else None
        self._sleep = sleep

    def run(
        self,
        command: str,
        cwd: Optional[Path] = None,
        silent: bool = False,
        timeout: Optional[float] = None
    ) -> str:
        """Execute a command and wait for it to exit

        Args:
            command: Shell command, passed through unparsed
            cwd: Working directory for the child process
            silent: Capture output instead of streaming it to the terminal
            timeout: Override of the default timeout in seconds

        Returns:
            Captured stdout when silent, otherwise an empty string

        Raises:
            CommandError: On non-zero exit, timeout or spawn failure
        """
        timeout = timeout if timeout is not None else self.timeout
        cwd_text = str(cwd) if cwd else "."

        self.console.print(f"[cyan]→[/cyan] Running: [bold]{command}[/bold]")
        logger.debug("Executing %r in %s (timeout=%ss)", command, cwd_text, timeout)

        pipe = subprocess.PIPE if silent else None

        try:
            # Own session so a timeout can kill the shell and everything it spawned
            process = subprocess.Popen(
                command,
                shell=True,
                cwd=cwd,
                stdout=pipe,
                stderr=pipe,
                text=True,
                start_new_session=True
            )
        except OSError as e:
            result = ExecutionResult(
                command=command,
                cwd=cwd_text,
                exit_code=127,
                stdout="",
                stderr="",
                error=f"Command could not be started: {e}"
            )
        else:
            try:
                stdout, stderr = process.communicate(timeout=timeout)
            except subprocess.TimeoutExpired:
                _kill_process_group(process)
                stdout, stderr = process.communicate()
                result = ExecutionResult(
                    command=command,
                    cwd=cwd_text,
                    exit_code=124,  # Standard timeout exit code
                    stdout=_as_text(stdout),
                    stderr=_as_text(stderr),
                    error=f"Command timed out after {timeout} seconds"
                )
            except BaseException:
                # Ctrl+C never reaches a child in its own session
                _kill_process_group(process)
                process.wait()
                raise
            else:
                result = ExecutionResult(
                    command=command,
                    cwd=cwd_text,
                    exit_code=process.returncode,
                    stdout=_as_text(stdout),
                    stderr=_as_text(stderr),
                    error=None if process.returncode == 0 else f"Command exited with code {process.returncode}"
                )

        self._log_execution(result)

        if result.error:
            raise CommandError(
                command,
                result.error,
                stderr=result.stderr or None,
                exit_code=result.exit_code
            )

        return result.stdout if silent else ""

    def run_with_retry(
        self,
        command: str,
        retries: int = 2,
        cwd: Optional[Path] = None,
        silent: bool = False,
        timeout: Optional[float] = None,
        idempotent: bool = True,
        cleanup: Optional[Callable[[], None]] = None
    ) -> str:
        """Execute a command up to retries + 1 times with linear backoff

        Commands that leave partial side effects behind must be declared
        non-idempotent and supply a cleanup callable, which runs before
        every new attempt.

        Args:
            command: Shell command
            retries: Extra attempts after the first failure
            cwd: Working directory for the child process
            silent: Capture output instead of streaming it
            timeout: Per-attempt timeout override
            idempotent: Whether a failed attempt can be re-run as-is
            cleanup: Restores a clean state before a retry

        Returns:
            Output of the first successful attempt

        Raises:
            CommandError: The last attempt's error, unchanged
            ValueError: If a non-idempotent command has no cleanup
        """
        if not idempotent and cleanup is None:
            raise ValueError(f"Non-idempotent command needs a cleanup before retry: {command}")

        for attempt in range(retries + 1):
            try:
                return self.run(command, cwd=cwd, silent=silent, timeout=timeout)
            except CommandError:
                if attempt == retries:
                    raise

                self.console.print(
                    f"[yellow]⚠[/yellow] Attempt {attempt + 1}/{retries + 1} failed, retrying..."
                )
                self._sleep(self.retry_delay * (attempt + 1))

                if not idempotent:
                    logger.debug("Cleaning up before retrying %r", command)
                    cleanup()

    def _log_execution(self, result: ExecutionResult):
        """Write execution details to the log directory

        Args:
            result: Execution result to persist
        """
        if self.log_dir is None:
            return

        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        slug = re.sub(r"[^a-zA-Z0-9]+", "-", result.command)[:40].strip("-") or "command"
        log_path = self.log_dir / f"{timestamp}-{slug}.log"

        log_content = f"""
=== Command Execution Log ===
Timestamp: {datetime.now().isoformat()}
Command: {result.command}
Working Directory: {result.cwd}
Exit Code: {result.exit_code}
Error: {json.dumps(result.error)}

=== STDOUT ===
{result.stdout}

=== STDERR ===
{result.stderr}

=== End of Log ===
"""

        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            log_path.write_text(log_content)
        except OSError as e:
            # Don't fail execution if logging fails
            logger.warning("Failed to write execution log: %s", e)


def _kill_process_group(process: subprocess.Popen):
    """SIGKILL the child's whole process group, falling back to the child alone"""
    try:
        if hasattr(os, "killpg"):
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except (ProcessLookupError, PermissionError) as e:
        logger.debug("Process group %s already gone: %s", process.pid, e)


def _as_text(output) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
