import pytest

from Utils.channel import Channel
from Utils.constants import Line, is_end
from Utils.errors import SourceError
from Utils.line_loader import LineLoader
from Utils.metrics import STAGE_SOURCE, MetricsCollector


def _drain(ch):
    items = []
    while ch.depth:
        items.append(ch.take())
    return items


def test_trims_and_drops_blank_lines(write_lines):
    path = write_lines(["  hello  ", "", "   ", "\tworld", "x"])
    ch = Channel(100)
    loader = LineLoader(str(path), downstream_workers=3)

    loader.process(ch)

    items = _drain(ch)
    assert items[:3] == [Line("hello"), Line("world"), Line("x")]
    assert len(items) == 6
    assert all(is_end(i) for i in items[3:])
    assert loader.lines_read == 3


def test_missing_input_still_sends_end_per_worker(tmp_path):
    ch = Channel(10)
    loader = LineLoader(str(tmp_path / "nope.txt"), downstream_workers=4)

    with pytest.raises(SourceError):
        loader.process(ch)

    items = _drain(ch)
    assert len(items) == 4
    assert all(is_end(i) for i in items)


def test_preserve_order_numbers_lines(write_lines):
    path = write_lines(["a", "", "b", "c"])
    ch = Channel(10)
    LineLoader(str(path), downstream_workers=1, preserve_order=True).process(ch)

    items = _drain(ch)
    assert [(i.text, i.seq) for i in items[:-1]] == [("a", 0), ("b", 1), ("c", 2)]


def test_records_source_metrics(write_lines):
    path = write_lines(["a", "b"])
    metrics = MetricsCollector()
    LineLoader(str(path), metrics=metrics).process(Channel(10))
    assert metrics.processed(STAGE_SOURCE) == 2
