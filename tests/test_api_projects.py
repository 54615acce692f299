def test_health(client):
    resp = client.get("/api/v1/health/")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_create_and_get_project(client):
    resp = client.post(
        "/api/v1/projects/",
        json={"name": "  Launch Teaser ", "description": "30s cut"},
        headers={"X-User": "Dana"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "Launch Teaser"
    assert body["type"] == "Script"
    assert body["createdBy"] == "Dana"

    resp = client.get(f"/api/v1/projects/{body['id']}")
    assert resp.status_code == 200
    assert resp.json()["description"] == "30s cut"


def test_create_project_requires_name(client):
    resp = client.post("/api/v1/projects/", json={"name": "   "})
    assert resp.status_code == 422


def test_list_projects(client, project_id):
    client.post("/api/v1/projects/", json={"name": "Second"})
    names = {p["name"] for p in client.get("/api/v1/projects/").json()}
    assert names == {"Summer Vlog", "Second"}


def test_update_project(client, project_id):
    resp = client.patch(f"/api/v1/projects/{project_id}", json={"description": "beach edit"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Summer Vlog"
    assert resp.json()["description"] == "beach edit"

    resp = client.patch(f"/api/v1/projects/{project_id}", json={"name": ""})
    assert resp.status_code == 422


def test_delete_project_removes_script_data(client, project_id):
    client.post(f"/api/v1/projects/{project_id}/script-data", json={"version": 1})

    resp = client.delete(f"/api/v1/projects/{project_id}")
    assert resp.status_code == 204

    assert client.get(f"/api/v1/projects/{project_id}").status_code == 404
    assert client.get(f"/api/v1/projects/{project_id}/script-data").status_code == 404


def test_missing_project_is_404(client):
    assert client.get("/api/v1/projects/999").status_code == 404
    assert client.patch("/api/v1/projects/999", json={"name": "x"}).status_code == 404
    assert client.delete("/api/v1/projects/999").status_code == 404


def test_update_project_rejects_null_type(client, project_id):
    resp = client.patch(f"/api/v1/projects/{project_id}", json={"type": None})
    assert resp.status_code == 422

    resp = client.patch(f"/api/v1/projects/{project_id}", json={"description": None})
    assert resp.status_code == 200
    assert resp.json()["type"] == "Script"
    assert resp.json()["description"] is None
