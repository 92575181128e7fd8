"""
Wall-clock deadline used to turn fixed searches into anytime searches.
"""

import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TimeKeeper:
    """Deadline of time_threshold_ms milliseconds counted from start_time."""
    time_threshold_ms: float
    start_time: float = field(default_factory=time.perf_counter)

    def elapsed_ms(self):
        return (time.perf_counter() - self.start_time) * 1000.0

    def is_time_over(self):
        return self.elapsed_ms() >= self.time_threshold_ms
