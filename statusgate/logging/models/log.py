import datetime
import threading
from types import FrameType
from typing import Generic, TypeVar

import msgspec

from .entry import Entry

T = TypeVar("T", bound=Entry)


class Log(msgspec.Struct, Generic[T], kw_only=True):
    """An entry plus where and when it was logged."""

    entry: T
    filename: str
    function_name: str
    line_number: int
    thread_id: int
    timestamp: str

    @classmethod
    def capture(cls, entry: T, frame: FrameType) -> "Log[T]":
        return cls(
            entry=entry,
            filename=frame.f_code.co_filename,
            function_name=frame.f_code.co_name,
            line_number=frame.f_lineno,
            thread_id=threading.get_native_id(),
            timestamp=datetime.datetime.now(datetime.UTC).isoformat(),
        )

    def render(self, template: str) -> str:
        return self.entry.render(
            template,
            filename=self.filename,
            function_name=self.function_name,
            line_number=self.line_number,
            thread_id=self.thread_id,
            timestamp=self.timestamp,
        )
