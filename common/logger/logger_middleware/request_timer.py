# common/logger/logger_middleware/request_timer.py
import time
from contextlib import contextmanager
from typing import Iterator


class RequestTimer:
    """Per-request accumulator of named durations (ms) and counters."""

    def __init__(self) -> None:
        self.timings: dict[str, float] = {}

    @contextmanager
    def capture(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.add(name, (time.perf_counter() - start) * 1000)

    def add(self, name: str, value: float) -> None:
        # Repeated names accumulate
        self.timings[name] = self.timings.get(name, 0) + value

    def format_server_timing(self) -> str:
        # db;dur=10.50, sql;dur=5.20
        return ", ".join(
            f"{name};dur={dur:.2f}"
            for name, dur in self.timings.items()
            if name != "query_count"
        )


__all__ = ["RequestTimer"]
