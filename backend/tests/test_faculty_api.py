def test_faculty_create_list_and_fetch(client):
    created = client.post(
        "/api/faculty/",
        json={"name": "Grace Hopper", "email": "grace@example.edu", "departmentId": "cse", "maxWeeklyLoad": 16},
    )
    assert created.status_code == 201
    body = created.json()
    assert body["id"]
    assert body["invigilationCount"] == 0
    assert body["maxWeeklyLoad"] == 16
    assert body["isActive"] is True

    client.post("/api/faculty/", json={"id": "ece-1", "name": "Alan Turing", "departmentId": "ece", "isActive": False})

    everyone = client.get("/api/faculty/")
    assert [item["name"] for item in everyone.json()] == ["Alan Turing", "Grace Hopper"]

    cse = client.get("/api/faculty/", params={"departmentId": "cse"})
    assert [item["id"] for item in cse.json()] == [body["id"]]

    active = client.get("/api/faculty/", params={"activeOnly": True})
    assert [item["name"] for item in active.json()] == ["Grace Hopper"]

    fetched = client.get(f"/api/faculty/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["email"] == "grace@example.edu"


def test_duplicate_faculty_are_rejected(client):
    first = client.post("/api/faculty/", json={"id": "f1", "name": "One", "email": "one@example.edu", "departmentId": "cse"})
    assert first.status_code == 201

    same_id = client.post("/api/faculty/", json={"id": "f1", "name": "Other", "departmentId": "cse"})
    assert same_id.status_code == 409

    same_email = client.post("/api/faculty/", json={"name": "Other", "email": "one@example.edu", "departmentId": "cse"})
    assert same_email.status_code == 409


def test_unknown_faculty_returns_404(client):
    assert client.get("/api/faculty/nobody").status_code == 404
