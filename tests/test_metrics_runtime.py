import json

from fastapi.testclient import TestClient


def test_metrics_capture_request_and_histogram():
    from main import app
    with TestClient(app) as client:
        # Hit health to generate a request metric
        r = client.get("/health")
        assert r.status_code == 200

        m = client.get("/metrics")
        assert m.status_code == 200
        data = m.json()

    counters = data.get("counters", [])
    assert any(
        c.get("name") == "requests_total" and c.get("labels", {}).get("route") == "/health" and c.get("labels", {}).get("status") == "200"
        for c in counters
    )

    hists = data.get("histograms", [])
    assert any(
        h.get("name") == "request_latency_ms" and h.get("labels", {}).get("route") == "/health" and isinstance(h.get("counts"), list)
        for h in hists
    )
    assert data["active_sessions"] == 0


def test_counter_amounts_and_labels():
    from app.obs.metrics import get_counter, inc_counter
    inc_counter("commands_total", {"command": "/start"})
    inc_counter("commands_total", {"command": "/start"})
    inc_counter("sessions_expired_total", amount=3)
    assert get_counter("commands_total", {"command": "/start"}) == 2
    assert get_counter("commands_total", {"command": "/help"}) == 0
    assert get_counter("sessions_expired_total") == 3


def _log_lines(out: str):
    return [json.loads(line) for line in out.splitlines() if line.startswith("{")]


def test_logger_hashes_user_id(capsys):
    from app.obs.logger import log_event
    log_event("step", user_from=123456789, step="unit-test")
    log_event("step", user_id=123456789)
    log_event("step", user_id=987654321)
    first, second, other = _log_lines(capsys.readouterr().out)

    assert "123456789" not in json.dumps(first)
    assert "6789" not in first["user_from"]
    assert first["user_from"].startswith("usr_")
    # Same user correlates, different users do not
    assert first["user_from"] == second["user_from"]
    assert first["user_from"] != other["user_from"]


def test_logger_short_ids_are_hashed_too(capsys):
    from app.obs.logger import log_event
    log_event("step", user_id=42)
    (line,) = _log_lines(capsys.readouterr().out)
    assert line["user_from"].startswith("usr_")
    assert line["user_from"] != "42"
