async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["redis"] == "up"


async def test_unknown_path(client):
    response = await client.get("/api/v1/menus")

    assert response.status_code == 404
    assert response.json() == {"error": "Path not found: /api/v1/menus"}
