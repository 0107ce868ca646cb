import re


_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
    "w": 604800.0,
}

_DURATION_PART = re.compile(r"(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>ms|[smhdw])?", re.I)


class TimeParser:
    """
    Parses durations such as ``10s``, ``1m30s`` or ``250ms`` into seconds.
    A number without a unit is seconds.
    """

    def __init__(self, time_amount: str) -> None:
        parts = list(_DURATION_PART.finditer(time_amount))
        if len(parts) == 0:
            raise ValueError(f"Invalid duration '{time_amount}'")

        self.time = sum(
            float(part.group("value")) * _UNIT_SECONDS[(part.group("unit") or "s").lower()]
            for part in parts
        )
