from __future__ import annotations

import os
import re

from disfunc.listing import Symbol


def filter_by_file(symbols: list[Symbol], file: str | None) -> list[Symbol]:
    """Keep the symbols declared in a file with the given basename.
    """
    if not file:
        return symbols
    return [symbol for symbol in symbols if os.path.basename(symbol.file) == file]


def filter_by_symbol(symbols: list[Symbol], pattern: str | None) -> list[Symbol]:
    """Keep the symbols whose name matches a regular expression.

    Raises:
        re.error: If the pattern does not compile.

    """
    if not pattern:
        return symbols
    regex = re.compile(pattern)
    return [symbol for symbol in symbols if regex.search(symbol.name)]
