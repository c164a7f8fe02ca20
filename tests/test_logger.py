from voe.core.logger import PerformanceTimer, _mask_sensitive


class _FakeLogger:
    def __init__(self):
        self.records = []

    def debug(self, event, **kw):
        self.records.append(("debug", event, kw))

    def warning(self, event, **kw):
        self.records.append(("warning", event, kw))


def test_named_secrets_are_masked():
    out = _mask_sensitive(None, None, {
        "event": "Request sent",
        "api_key": "abcdefghijklmnop",
        "token": "short",
        "operation": "account_info",
    })
    assert out["event"] == "Request sent"
    assert out["api_key"] == "abcd****mnop"
    assert out["token"] == "****"
    assert out["operation"] == "account_info"


def test_key_query_param_is_scrubbed_from_urls():
    out = _mask_sensitive(None, None, {
        "event": "GET https://voe.sx/api/file/list?key=supersecret&page=2",
        "url": "https://voe.sx/api/account/info?key=supersecret",
        "nested": {"urls": ["https://x.y/?api_key=zzz"]},
    })
    assert "supersecret" not in out["url"]
    assert out["url"].endswith("key=<redacted>")
    assert "page=2" in out["event"]
    assert out["nested"]["urls"][0] == "https://x.y/?api_key=<redacted>"


def test_performance_timer_logs_completion_and_failure():
    log = _FakeLogger()

    with PerformanceTimer(log, "VOE request", operation="file_list"):
        pass

    try:
        with PerformanceTimer(log, "VOE request", operation="file_list"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    (lvl1, ev1, kw1), (lvl2, ev2, kw2) = log.records
    assert (lvl1, ev1) == ("debug", "VOE request completed")
    assert kw1["operation"] == "file_list"
    assert (lvl2, ev2) == ("debug", "VOE request failed")
    assert kw2["error"] == "boom"


def test_slow_operations_log_a_warning():
    log = _FakeLogger()
    with PerformanceTimer(log, "VOE request", slow_ms=-1.0):
        pass
    assert log.records[0][0] == "warning"
