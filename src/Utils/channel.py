import threading
from dataclasses import dataclass
from queue import Empty, Full, Queue
from typing import Any

from Utils.constants import CHANNEL_POLL_INTERVAL, DEFAULT_QUEUE_SIZE, END
from Utils.errors import ChannelInterrupted


@dataclass
class ChannelStats:
    capacity: int
    current_depth: int
    total_put: int
    total_get: int


class Channel:
    """
    Bounded FIFO shared between pipeline stages.

    put() blocks while the channel is full, take() blocks while it is empty,
    so a slow consumer throttles its producers. interrupt() wakes every
    blocked caller with ChannelInterrupted.
    """
    def __init__(self, capacity: int = DEFAULT_QUEUE_SIZE, name: str = "channel", poll_interval: float = CHANNEL_POLL_INTERVAL):
        if int(capacity) < 1:
            raise ValueError(f"Channel capacity must be >= 1, got {capacity}")
        self.name = name
        self._capacity = int(capacity)
        self._queue: Queue = Queue(maxsize=self._capacity)
        self._poll_interval = float(poll_interval)
        self._interrupted = threading.Event()
        self._lock = threading.Lock()
        self._total_put = 0
        self._total_get = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def depth(self) -> int:
        return self._queue.qsize()

    @property
    def interrupted(self) -> bool:
        return self._interrupted.is_set()

    def put(self, item: Any):
        while True:
            self._check_interrupted()
            try:
                self._queue.put(item, timeout=self._poll_interval)
            except Full:
                continue
            with self._lock:
                self._total_put += 1
            return

    def take(self) -> Any:
        while True:
            self._check_interrupted()
            try:
                item = self._queue.get(timeout=self._poll_interval)
            except Empty:
                continue
            with self._lock:
                self._total_get += 1
            return item

    def send_end(self, count: int = 1):
        # one END per consumer so each of them exits exactly once
        for _ in range(count):
            self.put(END)

    def interrupt(self):
        self._interrupted.set()

    def stats(self) -> ChannelStats:
        with self._lock:
            return ChannelStats(capacity=self._capacity, current_depth=self.depth,
                                total_put=self._total_put, total_get=self._total_get)

    def _check_interrupted(self):
        if self._interrupted.is_set():
            raise ChannelInterrupted(f"channel '{self.name}' was interrupted")

    def __repr__(self) -> str:
        return f"<Channel '{self.name}' {self.depth}/{self._capacity}>"
