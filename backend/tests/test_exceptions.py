import pytest

from app.core.exceptions import AppError, InputInvalidError, ResourceNotFoundError, require_items


def test_input_invalid_error_structure():
    err = InputInvalidError(message="rooms must not be empty", details={"field": "rooms"})
    assert err.status_code == 400
    assert err.message == "rooms must not be empty"
    assert err.details == {"field": "rooms"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}


def test_resource_not_found_details():
    err = ResourceNotFoundError("Timetable", "t-1")
    assert err.status_code == 404
    assert err.details == {"resource_type": "Timetable", "resource_id": "t-1"}


def test_require_items():
    require_items("subjects", ["s1"])
    with pytest.raises(InputInvalidError, match="subjects must not be empty"):
        require_items("subjects", [])


def test_app_errors_render_as_json(client):
    response = client.post("/api/exams/exam-1/invigilators", json={"faculty": [{"id": "f1", "departmentId": "cse"}]})
    assert response.status_code == 400
    assert response.json() == {"message": "examSlots must not be empty", "details": {"field": "examSlots"}}
