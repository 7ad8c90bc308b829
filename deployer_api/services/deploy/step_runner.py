"""Step runners: execute one named provisioning action and stream its output."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

from ...constants import ERROR_CONTEXT_LINES
from .output_parser import StepOutputDecoder
from .subprocess_utils import create_subprocess, stop_subprocess, wait_subprocess

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]


@dataclass
class StepResult:
    """Outcome of one runner invocation."""

    success: bool
    output: str
    exit_code: int


@runtime_checkable
class StepRunner(Protocol):
    """
    Interface of the provisioning backend.

    Implementations call ``on_output`` with every output chunk, in order,
    before returning, and always return a :class:`StepResult`: transport or
    process errors are reported as a failed result, never raised.
    """

    async def run(
        self,
        action: str,
        parameters: Dict[str, Any],
        on_output: Optional[OutputCallback] = None,
    ) -> StepResult:
        ...


class AnsibleStepRunner:
    """Runs Ansible playbooks from a playbook directory."""

    def __init__(self, ansible_dir: Path, executable: str = "ansible-playbook"):
        self.ansible_dir = Path(ansible_dir)
        self.executable = executable

    async def run(
        self,
        action: str,
        parameters: Dict[str, Any],
        on_output: Optional[OutputCallback] = None,
    ) -> StepResult:
        """Run playbook ``action`` with ``parameters`` as extra vars."""
        vars_file = self._write_vars_file(parameters) if parameters else None
        cmd = self._build_command(action, vars_file)
        logger.info(f"Running: {self.executable} {action} (extra vars via file)")

        chunks: List[str] = []
        process = None
        exit_code = None
        try:
            process, line_iterator = await create_subprocess(
                cmd=cmd, cwd=str(self.ansible_dir), env=self._build_env()
            )
            async for line in line_iterator:
                chunks.append(line)
                self._log_line(line)
                if on_output:
                    on_output(line)
            exit_code = await wait_subprocess(process)
        except Exception as e:
            if process is None:
                message = f"Failed to run {self.executable}: {e}"
            else:
                message = f"{self.executable} {action} aborted: {type(e).__name__}: {e}"
            logger.error(message)
            if on_output:
                on_output(message + "\n")
            chunks.append(message)
            return StepResult(success=False, output="".join(chunks), exit_code=-1)
        finally:
            if process is not None and exit_code is None:
                await stop_subprocess(process)
            if vars_file:
                try:
                    os.unlink(vars_file)
                except OSError:
                    logger.debug(f"Could not remove vars file {vars_file}")

        if exit_code != 0:
            logger.error(f"Playbook {action} failed with exit code {exit_code}")
            for line in chunks[-ERROR_CONTEXT_LINES:]:
                logger.error(f"  {line.rstrip()}")

        return StepResult(
            success=exit_code == 0, output="".join(chunks), exit_code=exit_code
        )

    def _build_command(self, action: str, vars_file: Optional[str]) -> List[str]:
        cmd = [
            self.executable,
            "-i",
            os.fspath(self.ansible_dir / "inventory"),
            os.fspath(self.ansible_dir / action),
        ]
        if vars_file:
            cmd += ["--extra-vars", f"@{vars_file}"]
        cmd.append("-v")
        return cmd

    @staticmethod
    def _write_vars_file(parameters: Dict[str, Any]) -> str:
        # A file avoids shell-escaping problems with tokens and JSON values
        fd, path = tempfile.mkstemp(prefix="ansible-vars-", suffix=".json")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(parameters, f)
        return path

    @staticmethod
    def _build_env() -> Dict[str, str]:
        home = os.environ.get("HOME", "/app")
        return {
            **os.environ,
            "ANSIBLE_FORCE_COLOR": "false",
            "ANSIBLE_NOCOLOR": "true",
            "HOME": home,
            "ANSIBLE_LOCAL_TEMP": os.environ.get(
                "ANSIBLE_LOCAL_TEMP", f"{home}/.ansible/tmp"
            ),
            "ANSIBLE_REMOTE_TEMP": os.environ.get(
                "ANSIBLE_REMOTE_TEMP", f"{home}/.ansible/tmp"
            ),
        }

    @staticmethod
    def _log_line(line: str) -> None:
        text = line.rstrip()
        if not text:
            return
        level = StepOutputDecoder.classify_line(text)
        if level == "error":
            logger.error(f"Playbook: {text}")
        elif level == "warning":
            logger.warning(f"Playbook: {text}")
        else:
            logger.debug(f"Playbook output: {text}")
