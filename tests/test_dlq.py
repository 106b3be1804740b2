import json

from Utils.constants import Line
from Utils.dlq import write_dlq


def test_entry_is_written_under_the_given_directory(tmp_path):
    dlq = tmp_path / "dlq"

    path = write_dlq(Line("bad line", 7), "boom", str(dlq), exc_trace="Traceback ...")

    assert path is not None
    entries = list(dlq.glob("dlq_*.json"))
    assert [str(e) for e in entries] == [path]
    entry = json.loads(entries[0].read_text(encoding="utf-8"))
    assert entry["line"] == "bad line"
    assert entry["seq"] == 7
    assert entry["error"] == "boom"
    assert entry["trace"] == "Traceback ..."


def test_unwritable_directory_returns_none(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")

    assert write_dlq(Line("x"), "boom", str(blocker / "dlq")) is None
