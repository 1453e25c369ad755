"""Health endpoint."""

from __future__ import annotations


def test_health_reports_components(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "ok"
    assert body["db"] == "ok"
    assert body["redis"] == "disabled"
    assert {"version", "commit"} <= set(body)


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/v1/nowhere")

    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["instance"] == "/api/v1/nowhere"
