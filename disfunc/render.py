"""Render parsed symbols as source-interleaved, colorized listings.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.text import Text

from disfunc.listing import Instruction, Symbol

logger = logging.getLogger(__name__)

SYMBOL_STYLE = "bright_yellow"
SOURCE_STYLE = "bold bright_yellow"

# Instruction classes, checked in this order.
CALL_MNEMONICS = {"CALL", "RET"}
JUMP_PREFIXES = ("J",)
TRAP_MNEMONICS = {"UD2"}
PADDING_MNEMONICS = {"INT"}
PADDING_PREFIXES = ("NOP",)

CLASS_STYLES = {
    "call": "bright_green",
    "jump": "bright_blue",
    "trap": "bright_red",
    "padding": "bright_magenta",
}

# Unconditional control flow; the trailing space is part of the match.
BLOCK_END_PREFIXES = ("JMP ", "RET ", "UD2 ")


def classify(mnemonic: str) -> str | None:
    """Return the display class of a mnemonic, or None when unstyled.
    """
    if mnemonic in CALL_MNEMONICS:
        return "call"
    if mnemonic.startswith(JUMP_PREFIXES):
        return "jump"
    if mnemonic in TRAP_MNEMONICS:
        return "trap"
    if mnemonic in PADDING_MNEMONICS or mnemonic.startswith(PADDING_PREFIXES):
        return "padding"
    return None


def format_instruction(instruction: Instruction) -> str:
    """Format the mnemonic with its resolved alias or raw operand.
    """
    argument = instruction.alias or instruction.operand
    if argument:
        return f"{instruction.mnemonic:<5} {argument}"
    return instruction.mnemonic


def ends_block(decoded: str) -> bool:
    return decoded.startswith(BLOCK_END_PREFIXES)


def shorten(line: str) -> str:
    return line.replace("\t", "  ")


def read_source_lines(path: str) -> list[str]:
    """Read a source file as a list of lines.

    Raises:
        OSError: If the file cannot be read.

    """
    content = Path(path).read_text(encoding="utf-8", errors="replace")
    return [line.rstrip("\r") for line in content.split("\n")]


def get_source_line(lines: list[str], line: int) -> str:
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return ""


def emit(console: Console, text: Text | None = None) -> None:
    if text is None:
        console.print()
        return
    console.print(text, soft_wrap=True)


def render_instruction(instruction: Instruction) -> Text:
    text = Text("  ")
    style = CLASS_STYLES.get(classify(instruction.mnemonic) or "")
    text.append(format_instruction(instruction), style=style)
    return text


def render_source_line(line: int, source: str) -> Text:
    text = Text(f"{line}  ")
    text.append(shorten(source), style=SOURCE_STYLE)
    return text


def print_symbol(console: Console, symbol: Symbol, lines: list[str]) -> None:
    """Render one symbol, grouping its instructions under their source lines.

    Instructions are reordered by source line in place.
    """
    emit(console, Text(symbol.name, style=SYMBOL_STYLE))
    symbol.instructions.sort(key=lambda instruction: instruction.line)

    last_line = 0
    for instruction in symbol.instructions:
        if instruction.line != last_line:
            emit(console, render_source_line(instruction.line, get_source_line(lines, instruction.line)))
            last_line = instruction.line

        emit(console, render_instruction(instruction))
        if ends_block(instruction.decoded):
            emit(console)


def print_annotated(console: Console, symbols: list[Symbol]) -> None:
    """Render all symbols ordered by (file, name).

    Symbols whose source file cannot be read are reported on the console and
    skipped. The list is sorted in place.
    """
    symbols.sort(key=lambda symbol: (symbol.file, symbol.name))
    sources: dict[str, list[str]] = {}
    for symbol in symbols:
        lines = sources.get(symbol.file)
        if lines is None:
            try:
                lines = read_source_lines(symbol.file)
            except OSError as exc:
                logger.debug("failed to read %s: %s", symbol.file, exc)
                emit(console, Text(f'couldn\'t read "{symbol.file}", skipping'))
                continue
            sources[symbol.file] = lines
        print_symbol(console, symbol, lines)
