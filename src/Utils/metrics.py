import threading
from typing import Any, Dict, List, Sequence

STAGE_SOURCE = 0
STAGE_TRANSFORM = 1
STAGE_SINK = 2
STAGE_NAMES = ("source", "transform", "sink")


class MetricsCollector:
    """
    Thread-safe per-stage metrics: processed count, errors, total time.
    Workers call record_success / record_error with a stage index.
    """
    def __init__(self, stage_names: Sequence[str] = STAGE_NAMES):
        self._lock = threading.Lock()
        self._names = list(stage_names)
        self._counts = [0] * len(self._names)
        self._errors = [0] * len(self._names)
        self._total_time = [0.0] * len(self._names)

    def record_success(self, stage_idx: int, elapsed: float = 0.0):
        if stage_idx < 0 or stage_idx >= len(self._names):
            return
        with self._lock:
            self._counts[stage_idx] += 1
            self._total_time[stage_idx] += float(elapsed)

    def record_error(self, stage_idx: int):
        if stage_idx < 0 or stage_idx >= len(self._names):
            return
        with self._lock:
            self._errors[stage_idx] += 1

    def processed(self, stage_idx: int) -> int:
        with self._lock:
            return self._counts[stage_idx]

    def errors(self, stage_idx: int) -> int:
        with self._lock:
            return self._errors[stage_idx]

    def snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            out = []
            for i, name in enumerate(self._names):
                count = self._counts[i]
                total = self._total_time[i]
                avg = (total / count) if count else 0.0
                out.append({"stage": name, "processed": count, "errors": self._errors[i],
                            "avg_latency": avg, "total_time": total})
            return out

    def format_report(self) -> str:
        return "\n".join(
            f"Stage {entry['stage']}: processed={entry['processed']}, errors={entry['errors']}, "
            f"avg_latency={entry['avg_latency']:.6f}s"
            for entry in self.snapshot()
        )
