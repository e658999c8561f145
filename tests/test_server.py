import pytest
from fastapi.testclient import TestClient

from server import app


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c


def test_health_check(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_render_returns_svg(client: TestClient, fake_gnuplot):
    fake_gnuplot()

    response = client.post(
        "/render",
        json={
            "commands": "set terminal svg\nplot $points using 1:2",
            "data": {"points": {"x": [1, 2, 3], "y": [0.5, 1.5]}},
        },
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    lines = response.text.splitlines()
    assert lines[0].startswith("<svg")
    # Shorter column is padded with an empty cell
    assert lines[3:8] == ["$points << EOD", "x,y", "1,0.5", "2,1.5", "3,"]
    assert lines[-2:] == ["plot $points using 1:2", "exit"]


def test_render_unknown_format_is_octet_stream(client: TestClient, fake_gnuplot):
    fake_gnuplot()

    response = client.post("/render", json={"commands": "set terminal dumb", "format": "txt"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/octet-stream"


def test_render_without_gnuplot_is_503(client: TestClient, missing_gnuplot):
    response = client.post("/render", json={"commands": "plot x"})

    assert response.status_code == 503
    assert "gnuplot" in response.json()["detail"]


def test_unexpected_render_error_is_500(client: TestClient, monkeypatch):
    def _boom(body):
        raise ValueError("bad column data")

    monkeypatch.setattr("server._render", _boom)

    response = client.post("/render", json={"commands": "plot x"})

    assert response.status_code == 500
    assert "bad column data" in response.json()["detail"]
