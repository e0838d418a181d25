"""
RiriLang Diagnostics

A small sink for non-fatal compiler messages. Fatal conditions are raised as
RiriError subclasses instead.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    """A single reported message with optional source location."""
    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    file: Optional[str] = None
    level: int = logging.WARNING

    def __str__(self) -> str:
        location = []
        if self.file:
            location.append(self.file)
        if self.line is not None:
            location.append(str(self.line))
            if self.column is not None:
                location.append(str(self.column))
        if location:
            return f"{':'.join(location)}: {self.message}"
        return self.message


class Diagnostics:
    """Records diagnostics and forwards them to the logging system."""

    def __init__(self):
        self.records: List[Diagnostic] = []

    def report(self, message: str, line: Optional[int] = None,
               column: Optional[int] = None, file: Optional[str] = None,
               level: int = logging.WARNING) -> None:
        diagnostic = Diagnostic(message, line, column, file, level)
        self.records.append(diagnostic)
        logger.log(level, "%s", diagnostic)

    def messages(self) -> List[str]:
        return [d.message for d in self.records]

    def __len__(self) -> int:
        return len(self.records)
