"""Shared fixtures for disfunc tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

UTIL_GO = """\
package nin

func CanonicalizePath(path string) string {
\tif path == "" {
\t\treturn path
\t}
\treturn clean(path)
}
"""


@pytest.fixture
def util_go(tmp_path: Path) -> Path:
    """Write a small Go source file the listing can refer to."""
    path = tmp_path / "util.go"
    path.write_text(UTIL_GO)
    return path


@pytest.fixture
def util_listing(util_go: Path) -> str:
    """An objdump listing for util.go with a forward jump and a call."""
    return (
        f"TEXT nin.CanonicalizePath(SB) {util_go}\n"
        "  util.go:3\t0x1000\t4883ec18\tSUBQ $0x18, SP\n"
        "  util.go:4\t0x1004\t4885c0\tTESTQ AX, AX\n"
        "  util.go:4\t0x1007\t7405\tJE 0x1010\n"
        "  util.go:7\t0x1009\te800000000\tCALL nin.clean(SB)\n"
        "  util.go:7\t0x100e\tc3\tRET\n"
        "  util.go:5\t0x1010\t4883c418\tADDQ $0x18, SP\n"
        "  util.go:5\t0x1014\tc3\tRET\n"
    )


@pytest.fixture
def console() -> Console:
    """A console recording plain text output."""
    return Console(file=io.StringIO(), force_terminal=False, no_color=True, width=200, markup=False, highlight=False)


@pytest.fixture
def color_console() -> Console:
    """A console emitting ANSI escape codes."""
    return Console(
        file=io.StringIO(),
        force_terminal=True,
        color_system="standard",
        no_color=False,
        width=200,
        markup=False,
        highlight=False,
    )


def output_of(console: Console) -> str:
    file = console.file
    assert isinstance(file, io.StringIO)
    return file.getvalue()
