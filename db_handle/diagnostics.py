"""
Diagnostics - Debug Error Log

When a handle runs with debug enabled, every failure message is appended
to a plain text file (one message per line, no rotation, no structure).
Each file gets its own `db_handle.errors.*` logger that does not propagate,
so these lines never reach the application's handlers twice. The file
handler is attached lazily; a handle that never fails never creates the file.
"""

import logging
from pathlib import Path
from typing import Optional, Union


class ErrorLogFile:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._handler: Optional[logging.FileHandler] = None
        self._logger = logging.getLogger(f"db_handle.errors.{self.path.resolve()}")
        self._logger.propagate = False
        self._logger.setLevel(logging.ERROR)

    def append(self, message: str) -> None:
        # Handles sharing a path share one logger; attach a single file handler
        if not self._logger.handlers:
            # delay=True keeps the file closed until the first record
            self._handler = logging.FileHandler(self.path, mode="a", encoding="utf-8", delay=True)
            self._handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(self._handler)

        self._logger.error(message)

    def close(self) -> None:
        if self._handler is not None:
            self._logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
