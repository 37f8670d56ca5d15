"""CSV tables with cell addressing, typed values, streaming, compression and a command-line tool."""

__version__ = "0.1.0"