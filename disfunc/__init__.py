"""Annotated disassembly of Go functions, interleaved with their source."""

__version__ = "0.1.0"
