# tests/test_routes/test_health_routes.py


def test_health(test_client):
    response = test_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_database_health(test_client, mock_db):
    response = test_client.get("/health/db")

    assert response.status_code == 200
    mock_db.execute.assert_awaited_once()


def test_database_unreachable(test_client, mock_db):
    mock_db.execute.side_effect = ConnectionRefusedError("connection refused")

    response = test_client.get("/health/db")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"
