"""SimpleLog Lite - Small logging primitives.

- stringify / create_stringify_logger: console-style argument formatting with
  optional static prefix, call-time prefix and epoch/ISO timestamps
- FileLogger / create_file_logger: append-only log file with TTL pruning via
  embedded age markers and optional max-age deletion
"""

__version__ = "0.1.0"

from simplelog_lite.config import Config, SinkOptions, StringifyOptions
from simplelog_lite.file_logger import FileLogger, create_file_logger
from simplelog_lite.stringify import StringifyLogger, create_stringify_logger, stringify

__all__ = [
    "Config",
    "SinkOptions",
    "StringifyOptions",
    "FileLogger",
    "create_file_logger",
    "StringifyLogger",
    "create_stringify_logger",
    "stringify",
]
