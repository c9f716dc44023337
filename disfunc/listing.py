"""Parse `go tool objdump` listings into symbols and an address index.

The listing grammar is line oriented:

    TEXT <symbol> <file>
      <file>:<line>\t<offset>\t<hexbytes>\t<mnemonic> [<operand>]

Header lines start at column zero, instruction lines are indented by exactly
two spaces and belong to the most recent header.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator

logger = logging.getLogger(__name__)

TEXT_PREFIX = "TEXT "
INSTRUCTION_INDENT = "  "
ADDRESS_DIGITS_RE = re.compile(r"^_?[0-9a-zA-Z]+(?:_[0-9a-zA-Z]+)*$")
BASE_PREFIXES = {"0x": 16, "0o": 8, "0b": 2}
LINE_NUMBER_RE = re.compile(r"^[0-9]+$")


class FormatError(Exception):
    """Raised when the listing does not follow the disassembler grammar.
    """

    def __init__(self, message: str, line_no: int, text: str) -> None:
        super().__init__(f"{message}: line {line_no}: {text!r}")
        self.message = message
        self.line_no = line_no
        self.text = text


@dataclass
class Instruction:
    file: str
    line: int
    offset: int
    machine_code: str
    decoded: str
    mnemonic: str
    operand: str
    alias: str | None = None

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass
class Symbol:
    file: str
    name: str
    instructions: list[Instruction] = field(default_factory=list)


class AddressIndex:
    """Binary offset to "file:line" lookup, filled while parsing.
    """

    def __init__(self) -> None:
        self._locations: dict[int, str] = {}

    def record(self, offset: int, location: str) -> None:
        previous = self._locations.get(offset)
        if previous is not None and previous != location:
            logger.debug("offset 0x%x moved from %s to %s", offset, previous, location)
        self._locations[offset] = location

    def lookup(self, offset: int) -> str | None:
        return self._locations.get(offset)

    def __contains__(self, offset: object) -> bool:
        return offset in self._locations

    def __iter__(self) -> Iterator[int]:
        return iter(self._locations)

    def __len__(self) -> int:
        return len(self._locations)


@dataclass
class Listing:
    symbols: list[Symbol]
    addresses: AddressIndex


def parse_address(text: str) -> int:
    """Parse an integer literal the way Go's strconv.ParseInt(s, 0, 0) does.

    Accepts an optional sign, then a 0x, 0o or 0b prefix, a bare leading 0 for
    octal, or plain decimal. Underscores may separate digits only after a base
    prefix.

    Raises:
        ValueError: If the text is not an integer literal.

    """
    digits = text
    negative = digits[:1] == "-"
    if digits[:1] in ("+", "-"):
        digits = digits[1:]

    base = BASE_PREFIXES.get(digits[:2].lower())
    if base is not None:
        digits = digits[2:]
    elif len(digits) > 1 and digits[0] == "0":
        base = 8
        digits = digits[1:]
    else:
        base = 10
        if "_" in digits:
            raise ValueError(f"invalid address: {text!r}")

    if not ADDRESS_DIGITS_RE.match(digits):
        raise ValueError(f"invalid address: {text!r}")
    try:
        value = int(digits.replace("_", ""), base)
    except ValueError as exc:
        raise ValueError(f"invalid address: {text!r}") from exc
    return -value if negative else value


def parse_header(line: str, line_no: int) -> Symbol:
    """Build a Symbol from a `TEXT <symbol> <file>` line.

    Raises:
        FormatError: If the header does not carry both a symbol and a file.

    """
    fields = line[len(TEXT_PREFIX):].split(" ", 1)
    if len(fields) != 2:
        raise FormatError("expected symbol and file", line_no, line)
    return Symbol(file=fields[1], name=fields[0])


def parse_instruction(line: str, line_no: int) -> Instruction:
    """Decode one indented instruction line.

    Raises:
        FormatError: If a delimiter is missing or a number does not parse.

    """
    rest = line[len(INSTRUCTION_INDENT):]
    colon = rest.find(":")
    tab = rest.find("\t")
    if colon == -1 or tab == -1 or colon > tab:
        raise FormatError("expected <file>:<line> followed by a tab", line_no, line)
    file = rest[:colon]
    line_text = rest[colon + 1:tab]
    if not LINE_NUMBER_RE.match(line_text) or int(line_text) < 1:
        raise FormatError(f"invalid source line {line_text!r}", line_no, line)
    source_line = int(line_text)

    rest = rest[tab:].strip()
    tab = rest.find("\t")
    if tab == -1:
        raise FormatError("expected offset followed by a tab", line_no, line)
    offset_text = rest[:tab].strip()
    try:
        offset = parse_address(offset_text)
    except ValueError as exc:
        raise FormatError(f"invalid offset {offset_text!r}", line_no, line) from exc

    rest = rest[tab:].strip()
    tab = rest.find("\t")
    if tab == -1:
        raise FormatError("expected machine code followed by a tab", line_no, line)
    machine_code = rest[:tab].strip()
    decoded = rest[tab:].strip()
    mnemonic, _, operand = decoded.partition(" ")

    return Instruction(
        file=file,
        line=source_line,
        offset=offset,
        machine_code=machine_code,
        decoded=decoded,
        mnemonic=mnemonic,
        operand=operand,
    )


def parse_listing(text: str) -> Listing:
    """Parse a whole listing.

    Every instruction is recorded in the address index as it is read, so the
    index covers symbols that later filters drop.

    Raises:
        FormatError: On the first malformed line; nothing is returned.

    """
    symbols: list[Symbol] = []
    addresses = AddressIndex()
    for line_no, line in enumerate(text.split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        if line == "":
            continue

        if line.startswith(TEXT_PREFIX):
            symbols.append(parse_header(line, line_no))
            continue

        if not line.startswith(INSTRUCTION_INDENT):
            raise FormatError("expected TEXT header or indented instruction", line_no, line)
        if not symbols:
            raise FormatError("instruction before any TEXT header", line_no, line)

        instruction = parse_instruction(line, line_no)
        symbols[-1].instructions.append(instruction)
        addresses.record(instruction.offset, instruction.location)

    logger.debug("parsed %d symbols, %d addresses", len(symbols), len(addresses))
    return Listing(symbols=symbols, addresses=addresses)
