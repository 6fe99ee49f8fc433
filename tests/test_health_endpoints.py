def test_health_check(client):
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    body = r.json()
    assert body.get("status") == "healthy"


def test_test_connections(client):
    r = client.get("/api/v1/test-connections")
    assert r.status_code == 200
    body = r.json()
    assert body.get("database") == "connected"


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["docs_url"] == "/api/v1/docs"
