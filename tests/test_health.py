from __future__ import annotations


def test_health_ok(client) -> None:
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_metrics_exposes_form_fill_counters(client) -> None:
    client.get("/health")

    res = client.get("/metrics")

    assert res.status_code == 200
    assert "http_requests_total" in res.text
    assert "form_fills_total" in res.text
    assert "llm_request_duration_seconds" in res.text
