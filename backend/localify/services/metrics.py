import threading, time
from dataclasses import dataclass


@dataclass
class PerformanceReport:
    uptime_s: float
    total_requests: int
    error_responses: int
    avg_ms: float
    p95_ms: float
    max_concurrent: int


class PerformanceMonitor:
    """Request counters and timings for one run of the preview server."""

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        with self._lock:
            self.started_at = time.monotonic()
            self.request_count = 0
            self.error_count = 0
            self.active = 0
            self.max_active = 0
            self.durations_ms: list[float] = []

    def start_request(self) -> int:
        """Count a new request; returns its 1-based sequence number."""
        with self._lock:
            self.request_count += 1
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            return self.request_count

    def end_request(self, duration_ms: float, status_code: int):
        with self._lock:
            self.active -= 1
            self.durations_ms.append(duration_ms)
            if status_code >= 400:
                self.error_count += 1

    def report(self) -> PerformanceReport:
        with self._lock:
            times = sorted(self.durations_ms)
            avg = sum(times) / len(times) if times else 0.0
            p95 = times[min(int(len(times) * 0.95), len(times) - 1)] if times else 0.0
            return PerformanceReport(
                uptime_s=time.monotonic() - self.started_at,
                total_requests=self.request_count,
                error_responses=self.error_count,
                avg_ms=avg,
                p95_ms=p95,
                max_concurrent=self.max_active,
            )
