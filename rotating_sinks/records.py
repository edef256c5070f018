"""Formatted log record model consumed by the sinks."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FormattedRecord:
    data: bytes

    @property
    def length(self) -> int:
        return len(self.data)

    @classmethod
    def from_text(cls, text: str, encoding: str = "utf-8") -> "FormattedRecord":
        """Encode a rendered line, appending the trailing newline if missing."""
        if not text.endswith("\n"):
            text += "\n"
        return cls(text.encode(encoding))
