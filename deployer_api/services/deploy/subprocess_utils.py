"""
Async process helpers used by the step runner and the cluster prober.

Output is merged (stderr into stdout) and handed back as decoded text lines.
Windows event loops cannot always drive pipes, so there the process is a
plain Popen whose reads are pushed onto a small worker pool.
"""

import asyncio
import platform
import subprocess
from concurrent.futures import ThreadPoolExecutor
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

IS_WINDOWS = platform.system() == "Windows"

_pipe_readers = ThreadPoolExecutor(max_workers=4, thread_name_prefix="step_pipe")

# Output is read in blocks, so a line may be longer than the StreamReader limit
READ_CHUNK_SIZE = 64 * 1024


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


async def _in_worker(fn) -> Any:
    return await asyncio.get_running_loop().run_in_executor(_pipe_readers, fn)


async def _threaded_lines(process: subprocess.Popen) -> AsyncIterator[str]:
    while True:
        raw = await _in_worker(process.stdout.readline)
        if raw == b"":
            return
        yield _decode(raw)


async def _stream_lines(process: "asyncio.subprocess.Process") -> AsyncIterator[str]:
    pending = bytearray()
    while True:
        block = await process.stdout.read(READ_CHUNK_SIZE)
        if not block:
            break
        pending += block
        end = pending.rfind(b"\n")
        if end < 0:
            continue
        complete = bytes(pending[: end + 1])
        del pending[: end + 1]
        for raw in complete.split(b"\n")[:-1]:
            yield _decode(raw + b"\n")
    if pending:
        yield _decode(bytes(pending))


async def create_subprocess(
    cmd: List[str],
    cwd: Optional[str] = None,
    env: Optional[Dict[str, str]] = None,
) -> Tuple[Any, AsyncIterator[str]]:
    """
    Start ``cmd`` and return ``(process, lines)``.

    ``lines`` yields each output line with its trailing newline. An
    executable that cannot be started raises ``OSError`` right here, before
    any line is read.
    """
    if not IS_WINDOWS:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        return process, _stream_lines(process)

    process = subprocess.Popen(
        cmd,
        cwd=cwd,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
    )
    return process, _threaded_lines(process)


async def wait_subprocess(process: Any) -> int:
    """Exit code of a process started by :func:`create_subprocess`."""
    if IS_WINDOWS:
        return await _in_worker(process.wait)
    return await process.wait()


async def stop_subprocess(process: Any) -> None:
    """Kill ``process`` if it is still running and reap it."""
    if IS_WINDOWS:
        if process.poll() is None:
            process.kill()
            await _in_worker(process.wait)
        return
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
