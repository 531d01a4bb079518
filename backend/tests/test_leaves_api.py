MONDAY = "2026-10-19"


def _seed_department(client):
    for faculty_id, name in (("f0", "Absent Teacher"), ("f1", "Busy Teacher"), ("f2", "Light Teacher")):
        response = client.post("/api/faculty/", json={"id": faculty_id, "name": name, "departmentId": "cse"})
        assert response.status_code == 201

    # f0 gets Monday 09:00-12:15, f2 Monday 09:00 and f1 Monday 10:00 and 11:15.
    response = client.post(
        "/api/timetable/generate",
        json={
            "departmentId": "cse",
            "semester": 5,
            "section": "A",
            "subjects": [
                {"id": "s1", "name": "Operating Systems", "facultyId": "f0", "hoursPerWeek": 3},
                {"id": "s2", "name": "Graphics", "facultyId": "f2", "hoursPerWeek": 1},
                {"id": "s3", "name": "Security", "facultyId": "f1", "hoursPerWeek": 2},
            ],
            "roomIds": ["r1", "r2"],
        },
    )
    assert response.status_code == 200
    return response.json()["slots"]


def test_partial_leave_is_recorded_with_substitutes(client):
    slots = _seed_department(client)
    assert {(slot["facultyId"], slot["startTime"]) for slot in slots if slot["day"] == "Monday"} == {
        ("f0", "09:00"),
        ("f0", "10:00"),
        ("f0", "11:15"),
        ("f2", "09:00"),
        ("f1", "10:00"),
        ("f1", "11:15"),
    }

    response = client.post(
        "/api/leaves",
        json={
            "facultyId": "f0",
            "leaveType": "partial",
            "startDate": MONDAY,
            "startTime": "10:00",
            "endTime": "12:00",
            "reason": "Medical appointment",
        },
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["departmentId"] == "cse"
    assert body["endDate"] == MONDAY
    assert body["status"] == "applied"
    assert body["substituteId"] == "f2"
    assert [(slot["startTime"], slot["substituteId"]) for slot in body["affectedSlots"]] == [
        ("10:00", "f2"),
        ("11:15", "f2"),
    ]
    assert body["affectedSlots"][0]["substituteName"] == "Light Teacher"

    listed = client.get("/api/leaves", params={"facultyId": "f0"})
    assert listed.status_code == 200
    assert [item["id"] for item in listed.json()] == [body["id"]]


def test_colleague_on_leave_is_not_offered_as_substitute(client):
    _seed_department(client)
    response = client.post(
        "/api/leaves",
        json={"facultyId": "f2", "startDate": MONDAY, "reason": "Conference travel"},
    )
    assert response.status_code == 201
    assert response.json()["leaveType"] == "full_day"

    substitute = client.post(
        "/api/leaves/substitute",
        json={
            "departmentId": "cse",
            "excludeFacultyId": "f0",
            "day": "Monday",
            "startTime": "14:00",
            "endTime": "15:00",
            "leaveStartDate": MONDAY,
        },
    )
    assert substitute.status_code == 200
    assert substitute.json() == {"substitute": {"id": "f1", "name": "Busy Teacher"}}


def test_substitute_search_can_come_back_empty(client):
    _seed_department(client)
    response = client.post(
        "/api/leaves/substitute",
        json={
            "departmentId": "cse",
            "excludeFacultyId": "f0",
            "day": "Monday",
            "startTime": "09:00",
            "endTime": "12:00",
            "leaveStartDate": MONDAY,
        },
    )
    assert response.status_code == 200
    assert response.json() == {"substitute": None}


def test_leave_for_unknown_faculty_returns_404(client):
    response = client.post(
        "/api/leaves",
        json={"facultyId": "missing", "startDate": MONDAY, "reason": "Family event"},
    )
    assert response.status_code == 404


def test_partial_leave_needs_a_time_window(client):
    response = client.post(
        "/api/leaves",
        json={"facultyId": "f0", "leaveType": "partial", "startDate": MONDAY, "reason": "Clinic visit"},
    )
    assert response.status_code == 422


def test_replacement_suggestions_endpoint(client):
    response = client.post(
        "/api/leaves/replacement-suggestions",
        json={
            "subjectId": "s1",
            "departmentId": "cse",
            "day": "Monday",
            "startTime": "10:00",
            "endTime": "11:00",
            "excludeFacultyId": "f0",
            "faculty": [
                {"id": "f1", "name": "Other Dept", "departmentId": "ece", "currentLoad": 2, "maxWeeklyLoad": 18},
                {"id": "f2", "name": "Same Dept", "departmentId": "cse", "currentLoad": 9, "maxWeeklyLoad": 18},
            ],
            "subjectMappings": [],
            "busySlots": [],
        },
    )
    assert response.status_code == 200
    assert response.json() == [
        {"facultyId": "f2", "facultyName": "Same Dept", "reason": "Same department, available", "priority": 2, "loadPercentage": 50},
        {"facultyId": "f1", "facultyName": "Other Dept", "reason": "Available (different dept)", "priority": 3, "loadPercentage": 11},
    ]


def test_replacement_suggestions_need_faculty(client):
    response = client.post(
        "/api/leaves/replacement-suggestions",
        json={
            "subjectId": "s1",
            "departmentId": "cse",
            "day": "Monday",
            "startTime": "10:00",
            "endTime": "11:00",
            "excludeFacultyId": "f0",
        },
    )
    assert response.status_code == 400
    assert response.json()["details"] == {"field": "faculty"}


def test_leave_uses_the_faculty_department(client):
    _seed_department(client)
    mismatched = client.post(
        "/api/leaves",
        json={"facultyId": "f0", "departmentId": "ece", "startDate": MONDAY, "reason": "Conference travel"},
    )
    assert mismatched.status_code == 400
    assert mismatched.json()["details"] == {"field": "departmentId", "facultyDepartmentId": "cse"}
    assert client.get("/api/leaves").json() == []

    response = client.post(
        "/api/leaves",
        json={"facultyId": "f0", "departmentId": "cse", "startDate": MONDAY, "reason": "Conference travel"},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["departmentId"] == "cse"
    # f2 teaches at 09:00 and f1 at 10:00 and 11:15, so each covers the other's free periods.
    assert {slot["startTime"]: slot["substituteId"] for slot in body["affectedSlots"]} == {
        "09:00": "f1",
        "10:00": "f2",
        "11:15": "f2",
    }
