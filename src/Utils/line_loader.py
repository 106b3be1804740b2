# src/Utils/line_loader.py
# Reads the input file line by line, trims each line, drops blank ones and
# pushes the rest into the input channel. When input ends (or fails) it sends
# one END per downstream worker so every worker stops.

import logging
import time
from typing import Optional

from Utils.channel import Channel
from Utils.constants import DEFAULT_INPUT_FILE, Line
from Utils.errors import SourceError
from Utils.metrics import STAGE_SOURCE, MetricsCollector
from Utils.order_window import OrderWindow

logger = logging.getLogger("parallel_stemmer.source")


class LineLoader:
    """
    Source: pushes one Line per non-blank trimmed input line, then emits END
    downstream_workers times.
    """
    def __init__(self, input_path: str = DEFAULT_INPUT_FILE,
                 downstream_workers: int = 1,
                 preserve_order: bool = False,
                 metrics: Optional[MetricsCollector] = None,
                 window: Optional[OrderWindow] = None):
        self.input_path = input_path
        self.downstream_workers = max(1, int(downstream_workers))
        self.preserve_order = preserve_order
        self.metrics = metrics
        self.window = window
        self.lines_read = 0

    def process(self, output_channel: Channel):
        self.lines_read = 0
        try:
            with open(self.input_path, "r", encoding="utf-8") as fh:
                for raw in fh:
                    text = raw.strip()
                    if not text:
                        continue
                    seq = self.lines_read if self.preserve_order else None
                    start = time.perf_counter()
                    if self.window is not None:
                        self.window.acquire()
                    output_channel.put(Line(text, seq))
                    self.lines_read += 1
                    if self.metrics is not None:
                        # time spent blocked on a full channel
                        self.metrics.record_success(STAGE_SOURCE, time.perf_counter() - start)
        except (OSError, UnicodeDecodeError) as e:
            if self.metrics is not None:
                self.metrics.record_error(STAGE_SOURCE)
            raise SourceError(f"cannot read input file {self.input_path}: {e}") from e
        finally:
            # sent on every exit path so no worker blocks forever on take()
            output_channel.send_end(self.downstream_workers)
        logger.info("Source finished reading %s (%d lines)", self.input_path, self.lines_read)
