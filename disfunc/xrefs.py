from __future__ import annotations

import logging

from disfunc.listing import AddressIndex, Symbol, parse_address

logger = logging.getLogger(__name__)

JUMP_PREFIX = "J"


def is_jump(mnemonic: str) -> bool:
    return mnemonic.startswith(JUMP_PREFIX)


def resolve_jumps(symbols: list[Symbol], addresses: AddressIndex) -> int:
    """Replace jump targets with the source location they land on.

    Runs over every symbol before any filtering so that jumps into dropped
    symbols still resolve. Unparsable operands and unknown targets are left
    alone.

    Returns the number of resolved jumps.
    """
    resolved = 0
    for symbol in symbols:
        for instruction in symbol.instructions:
            if not is_jump(instruction.mnemonic):
                continue
            try:
                target = parse_address(instruction.operand)
            except ValueError:
                continue
            location = addresses.lookup(target)
            if location:
                instruction.alias = location
                resolved += 1
            else:
                logger.debug("%s: no source for jump target 0x%x", symbol.name, target)
    return resolved
