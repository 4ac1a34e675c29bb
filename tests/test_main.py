"""
Tests for the main module.
"""

from main import validate_cors_origins


def test_read_root(client):
    """Test the root endpoint returns the expected response."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Ascend AI API"}


def test_validate_cors_origins_drops_invalid_entries():
    origins = ["http://localhost:5173", "not-a-url", "ftp://example.com", "https://ascend.app"]

    assert validate_cors_origins(origins) == ["http://localhost:5173", "https://ascend.app"]
