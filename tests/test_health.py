# tests/test_health.py
from fastapi import status


def test_health(client) -> None:
    """The health endpoint responds without touching the database."""
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_root_describes_api(client) -> None:
    response = client.get("/")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["docs"] == "/docs"


def test_unknown_route_uses_error_envelope(client) -> None:
    response = client.get("/api/v1/nowhere")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"success": False, "error": "Not Found"}
