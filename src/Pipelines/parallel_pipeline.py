import logging
import threading
import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from Filters.output_filter import OutputFilter
from Filters.stem_filter import StemFilter

from Utils.channel import Channel
from Utils.constants import (
    DEFAULT_INPUT_FILE,
    DEFAULT_JOIN_TIMEOUT,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_WORKERS,
    Line,
    ResultRecord,
    is_end,
)
from Utils.dlq import write_dlq
from Utils.errors import ChannelInterrupted, PipelineInterrupted, SinkError, SourceError, WorkerJoinTimeout
from Utils.line_loader import LineLoader
from Utils.metrics import STAGE_SINK, STAGE_TRANSFORM, MetricsCollector
from Utils.order_window import OrderWindow
from Utils.thread_log import log_end, log_start

logger = logging.getLogger("parallel_stemmer.pipeline")
sink_logger = logging.getLogger("parallel_stemmer.sink")

# join granularity; keeps the coordinator responsive to KeyboardInterrupt
_JOIN_POLL = 0.1
# how long stop() waits for units after an operator interrupt
_STOP_GRACE = 5.0


class PipelineState(str, Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    DRAINING = "DRAINING"
    TERMINATED = "TERMINATED"


@dataclass
class PipelineResult:
    lines_read: int = 0
    records_produced: int = 0
    lines_written: int = 0
    transform_errors: int = 0
    source_error: Optional[SourceError] = None
    sink_error: Optional[SinkError] = None
    timed_out: bool = False
    interrupted: bool = False
    duration: float = 0.0
    metrics: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.timed_out or self.interrupted
                    or self.source_error is not None or self.sink_error is not None)

    def raise_for_status(self):
        if self.timed_out:
            raise WorkerJoinTimeout(
                f"workers did not finish in time; {self.records_produced} of {self.lines_read} "
                f"lines were processed and the output may be incomplete")
        if self.source_error is not None:
            raise self.source_error
        if self.sink_error is not None:
            raise self.sink_error
        if self.interrupted:
            raise PipelineInterrupted("pipeline was interrupted before all input was processed")


class ParallelPipeline:
    """
    Source -> input channel -> n_workers transform workers -> output channel -> sink.

    The source sends one END per worker when input is exhausted. The sink's
    single END is pushed here, and only after every worker has exited, so no
    in-flight record can arrive after it.
    """
    def __init__(self, input_path: str = DEFAULT_INPUT_FILE, output_path: str = DEFAULT_OUTPUT_FILE, n_workers: int = DEFAULT_WORKERS, queue_size: int = DEFAULT_QUEUE_SIZE, filter_factory: Optional[Callable[[], Any]] = None, join_timeout: float = DEFAULT_JOIN_TIMEOUT, preserve_order: bool = False, dlq_dir: Optional[str] = None, order_window: Optional[int] = None):
        if int(n_workers) < 1:
            raise ValueError(f"n_workers must be >= 1, got {n_workers}")
        if int(queue_size) < 1:
            raise ValueError(f"queue_size must be >= 1, got {queue_size}")
        if float(join_timeout) <= 0:
            raise ValueError(f"join_timeout must be > 0, got {join_timeout}")
        self.input_path = input_path
        self.output_path = output_path
        self.n_workers = int(n_workers)
        self.queue_size = int(queue_size)
        self.filter_factory = filter_factory or StemFilter
        self.join_timeout = float(join_timeout)
        self.preserve_order = preserve_order
        self.dlq_dir = dlq_dir

        # ordered mode: lines in flight are capped at what both channels and
        # the workers can hold, unless the caller picks another window
        self.window: Optional[OrderWindow] = None
        if preserve_order:
            if order_window is None:
                order_window = 2 * self.queue_size + self.n_workers
            self.window = OrderWindow(order_window)

        self.metrics = MetricsCollector()
        self.loader = LineLoader(input_path, downstream_workers=self.n_workers,
                                 preserve_order=preserve_order, metrics=self.metrics, window=self.window)
        self.writer = OutputFilter(output_path, preserve_order=preserve_order)

        self.input_channel: Optional[Channel] = None
        self.output_channel: Optional[Channel] = None
        self.threads: List[threading.Thread] = []
        self._source_thread: Optional[threading.Thread] = None
        self._worker_threads: List[threading.Thread] = []
        self._sink_thread: Optional[threading.Thread] = None

        self._state = PipelineState.IDLE
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._interrupted = threading.Event()
        self._source_error: Optional[SourceError] = None
        self._sink_error: Optional[SinkError] = None
        self._timed_out = False
        self._started_at = 0.0

    @property
    def state(self) -> PipelineState:
        return self._state

    def _set_state(self, state: PipelineState):
        logger.debug("Pipeline state %s -> %s", self._state.value, state.value)
        self._state = state

    # ---- units of concurrency ----

    def _run_source(self):
        try:
            self.loader.process(self.input_channel)
        except SourceError as e:
            logger.error("Error in source: %s", e)
            self._source_error = e
        except ChannelInterrupted:
            logger.warning("Source was interrupted after %d lines", self.loader.lines_read)
            self._interrupted.set()

    def _run_worker(self, filter_obj: Any):
        name = threading.current_thread().name
        try:
            while True:
                item = self.input_channel.take()
                if is_end(item):
                    break
                self.output_channel.put(self._transform(filter_obj, item))
            logger.info("%s finished processing", name)
        except ChannelInterrupted:
            logger.warning("%s was interrupted", name)
            self._interrupted.set()

    def _transform(self, filter_obj: Any, line: Line) -> ResultRecord:
        stage = getattr(filter_obj, "stage_name", type(filter_obj).__name__)
        log_start(stage, line)
        start = time.perf_counter()
        try:
            transformed = filter_obj.process(line.text)
            if not isinstance(transformed, str):
                raise TypeError(f"filter returned {type(transformed).__name__}, expected str")
            if "\n" in transformed or "\r" in transformed:
                # one record is one output line
                raise ValueError("filter returned text containing a line break")
        except Exception as e:
            # a bad line must not take the pool down: pass it through unchanged
            self.metrics.record_error(STAGE_TRANSFORM)
            logger.error("Transform failed for line %r: %s (passing it through)", line.text, e)
            if self.dlq_dir:
                write_dlq(line, str(e), self.dlq_dir, exc_trace=traceback.format_exc())
            log_end(stage, line, status="error")
            return ResultRecord(line.text, line.text, line.seq)
        self.metrics.record_success(STAGE_TRANSFORM, time.perf_counter() - start)
        log_end(stage, line)
        return ResultRecord(line.text, transformed, line.seq)

    def _run_sink(self):
        writer = self.writer
        try:
            writer.open()
        except OSError as e:
            self._sink_error = SinkError(f"cannot open output file {self.output_path}: {e}")
            sink_logger.error("Error in writer: %s; queued records will be discarded", self._sink_error)
        taken = released = 0
        try:
            while True:
                item = self.output_channel.take()
                if is_end(item):
                    break
                taken += 1
                self._write_record(item)
                if self.window is not None:
                    # records still held in the reorder buffer keep their slot
                    done = taken - writer.pending_count
                    self.window.release(done - released)
                    released = done
        except ChannelInterrupted:
            sink_logger.warning("Writer was interrupted after %d lines", writer.lines_written)
            self._interrupted.set()
        finally:
            if writer.is_open:
                try:
                    writer.close()
                except OSError as e:
                    self._sink_error = SinkError(f"cannot flush output file {self.output_path}: {e}")
                    sink_logger.error("Error in writer: %s", self._sink_error)
        sink_logger.info("Writer finished (%d lines written to %s)", writer.lines_written, self.output_path)

    def _write_record(self, record: ResultRecord):
        writer = self.writer
        if not writer.is_open:
            # keep draining so workers never block on a full channel
            self.metrics.record_error(STAGE_SINK)
            return
        start = time.perf_counter()
        try:
            writer.process(record)
        except OSError as e:
            self._sink_error = SinkError(f"cannot write output file {self.output_path}: {e}")
            sink_logger.error("Error in writer: %s; remaining records will be discarded", self._sink_error)
            self.metrics.record_error(STAGE_SINK)
            self._discard_writer()
            return
        self.metrics.record_success(STAGE_SINK, time.perf_counter() - start)

    def _discard_writer(self):
        try:
            self.writer.discard()
        except OSError as e:
            sink_logger.error("Error closing %s: %s", self.output_path, e)

    # ---- coordinator ----

    def _start_thread(self, name: str, target: Callable, *args) -> threading.Thread:
        t = threading.Thread(target=target, args=args, name=name, daemon=True)
        t.start()
        self.threads.append(t)
        return t

    def start(self):
        """IDLE -> RUNNING: build channels and per-worker filters, start every unit."""
        with self._state_lock:
            if self._state is not PipelineState.IDLE:
                raise RuntimeError(f"pipeline already started (state={self._state.value})")
            filters = [self.filter_factory() for _ in range(self.n_workers)]
            self.input_channel = Channel(self.queue_size, name="input")
            self.output_channel = Channel(self.queue_size, name="output")
            if self._stop_event.is_set():
                self.input_channel.interrupt()
                self.output_channel.interrupt()
            self._started_at = time.time()
            self._set_state(PipelineState.RUNNING)

        self._source_thread = self._start_thread("source", self._run_source)
        for i, filter_obj in enumerate(filters):
            self._worker_threads.append(self._start_thread(f"worker-{i}", self._run_worker, filter_obj))
        self._sink_thread = self._start_thread("sink", self._run_sink)
        logger.info("[Pipeline] Started source, %d worker(s) (%s) and sink; queue_size=%d",
                    self.n_workers, type(filters[0]).__name__, self.queue_size)

    def wait_for_completion(self) -> PipelineResult:
        """RUNNING -> DRAINING -> TERMINATED."""
        if self._state is not PipelineState.RUNNING:
            raise RuntimeError(f"pipeline is not running (state={self._state.value})")
        try:
            self._join(self._source_thread)
            self._set_state(PipelineState.DRAINING)
            self._join_workers()
            try:
                self.output_channel.send_end(1)
            except ChannelInterrupted:
                self._interrupted.set()
            self._join(self._sink_thread)
        except KeyboardInterrupt:
            logger.warning("Interrupted by operator, stopping pipeline")
            self._interrupted.set()
            self.stop()
            deadline = time.monotonic() + _STOP_GRACE
            for t in self.threads:
                t.join(max(0.0, deadline - time.monotonic()))
        self._set_state(PipelineState.TERMINATED)

        result = PipelineResult(
            lines_read=self.loader.lines_read,
            records_produced=self.metrics.processed(STAGE_TRANSFORM) + self.metrics.errors(STAGE_TRANSFORM),
            lines_written=self.writer.lines_written,
            transform_errors=self.metrics.errors(STAGE_TRANSFORM),
            source_error=self._source_error,
            sink_error=self._sink_error,
            timed_out=self._timed_out,
            interrupted=self._interrupted.is_set(),
            duration=time.time() - self._started_at,
            metrics=self.metrics.snapshot(),
        )
        if self._timed_out:
            # release workers still stuck on a channel; the result is final
            self.stop()
        self.log_metrics()
        return result

    def run(self) -> PipelineResult:
        self.start()
        return self.wait_for_completion()

    def stop(self):
        """Wake every unit blocked on a channel; each one exits and logs it."""
        self._stop_event.set()
        for ch in (self.input_channel, self.output_channel):
            if ch is not None:
                ch.interrupt()
        if self.window is not None:
            self.window.interrupt()

    def _join(self, thread: threading.Thread):
        while thread.is_alive():
            thread.join(_JOIN_POLL)

    def _join_workers(self):
        deadline = time.monotonic() + self.join_timeout
        for t in self._worker_threads:
            while t.is_alive():
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                t.join(min(remaining, _JOIN_POLL))
        alive = [t.name for t in self._worker_threads if t.is_alive()]
        if alive:
            self._timed_out = True
            logger.critical("Workers %s did not finish within %.1fs; not all input is guaranteed to be processed",
                            ", ".join(alive), self.join_timeout)

    def log_metrics(self):
        for line in self.metrics.format_report().splitlines():
            logger.info("[Pipeline] %s", line)


def process_file(input_path: str, output_path: str, **kwargs) -> PipelineResult:
    """Run the whole pipeline once and raise PipelineError on any recorded failure."""
    result = ParallelPipeline(input_path=input_path, output_path=output_path, **kwargs).run()
    result.raise_for_status()
    return result
