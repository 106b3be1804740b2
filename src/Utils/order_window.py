import threading

from Utils.constants import CHANNEL_POLL_INTERVAL
from Utils.errors import ChannelInterrupted


class OrderWindow:
    """
    Caps how many lines may be read but not yet written when output order is
    preserved, so the sink's reorder buffer stays bounded. The source
    acquires one slot per line; the sink releases slots as lines leave it.
    """
    def __init__(self, size: int, poll_interval: float = CHANNEL_POLL_INTERVAL):
        if int(size) < 1:
            raise ValueError(f"order window must be >= 1, got {size}")
        self.size = int(size)
        self._slots = threading.Semaphore(self.size)
        self._poll_interval = float(poll_interval)
        self._interrupted = threading.Event()

    def acquire(self):
        while True:
            if self._interrupted.is_set():
                raise ChannelInterrupted("order window was interrupted")
            if self._slots.acquire(timeout=self._poll_interval):
                return

    def release(self, count: int = 1):
        for _ in range(count):
            self._slots.release()

    def interrupt(self):
        self._interrupted.set()
