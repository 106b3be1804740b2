from typing import Dict, Optional, TextIO

from Utils.constants import DEFAULT_OUTPUT_FILE, ResultRecord


class OutputFilter:
    """
    Sink writer: appends record.transformed as one line per record.
    With preserve_order, records are held until every earlier seq has been
    written.
    """
    def __init__(self, output_path: str = DEFAULT_OUTPUT_FILE, preserve_order: bool = False):
        self.output_path = output_path
        self.preserve_order = preserve_order
        self.stage_name = "output"
        self.lines_written = 0
        self._fh: Optional[TextIO] = None
        self._pending: Dict[int, ResultRecord] = {}
        self._next_seq = 0

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    def open(self):
        # truncates any previous output
        self._fh = open(self.output_path, "w", encoding="utf-8")

    def process(self, record: ResultRecord):
        if self._fh is None:
            raise ValueError("OutputFilter: output is not open")
        if not self.preserve_order or record.seq is None:
            self._write(record)
            return
        self._pending[record.seq] = record
        while self._next_seq in self._pending:
            self._write(self._pending.pop(self._next_seq))
            self._next_seq += 1

    def close(self):
        if self._fh is None:
            return
        try:
            # only non-empty after an incomplete run; keep what we have in order
            for seq in sorted(self._pending):
                self._write(self._pending.pop(seq))
        finally:
            fh, self._fh = self._fh, None
            fh.close()

    def discard(self):
        """Close without flushing buffered records."""
        self._pending.clear()
        if self._fh is not None:
            fh, self._fh = self._fh, None
            fh.close()

    def _write(self, record: ResultRecord):
        self._fh.write(record.transformed)
        self._fh.write("\n")
        self.lines_written += 1
