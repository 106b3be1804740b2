from Utils.metrics import STAGE_SINK, STAGE_TRANSFORM, MetricsCollector


def test_snapshot_reports_counts_and_latency():
    m = MetricsCollector()
    m.record_success(STAGE_TRANSFORM, 0.2)
    m.record_success(STAGE_TRANSFORM, 0.4)
    m.record_error(STAGE_TRANSFORM)
    m.record_error(99)

    transform = {e["stage"]: e for e in m.snapshot()}["transform"]
    assert transform["processed"] == 2
    assert transform["errors"] == 1
    assert abs(transform["avg_latency"] - 0.3) < 1e-9
    assert m.errors(STAGE_SINK) == 0
    assert "Stage transform: processed=2" in m.format_report()
