from typing import Any

import msgspec

from .log_level import LogLevel


class Entry(msgspec.Struct, kw_only=True):
    """
    Base of every structured log entry. Subclasses add the fields that
    identify what the entry is about and pin a default ``level``.
    """

    message: str | None = None
    level: LogLevel

    def render(self, template: str, **context: Any) -> str:
        values = msgspec.structs.asdict(self)
        values["level"] = self.level.value

        return template.format_map({**values, **context})
