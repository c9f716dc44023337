"""Wrappers around the Go toolchain: build a binary, then disassemble it.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

GO = os.getenv("DISFUNC_GO", "go")


class ToolchainError(Exception):
    """Raised when the Go toolchain cannot be run or exits with an error.
    """

    def __init__(self, command: list[str], returncode: int | None, stderr: str) -> None:
        detail = stderr.strip() or (f"exit status {returncode}" if returncode is not None else "failed to start")
        super().__init__(f"{' '.join(command)}: {detail}")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


def run_go(args: list[str]) -> str:
    """Run the go tool and return its stdout.

    Raises:
        ToolchainError: If go is missing or exits non-zero.

    """
    command = [GO, *args]
    logger.debug("running: %s", " ".join(command))
    try:
        completed = subprocess.run(
            command, check=False, capture_output=True, text=True, encoding="utf-8", errors="replace"
        )
    except OSError as exc:
        raise ToolchainError(command, None, str(exc)) from exc
    if completed.returncode != 0:
        raise ToolchainError(command, completed.returncode, completed.stderr)
    return completed.stdout


def build_binary(pkg: str, output: Path) -> None:
    """Build a Go package into an executable.

    Raises:
        ToolchainError: If the build fails.

    """
    run_go(["build", "-o", str(output), pkg])


def disassemble(binary: Path, symbol_filter: str | None = None) -> str:
    """Return the `go tool objdump` listing of a binary.

    Raises:
        ToolchainError: If objdump fails.

    """
    args = ["tool", "objdump"]
    if symbol_filter:
        args.extend(["-s", symbol_filter])
    args.append(str(binary))
    return run_go(args)
