import pytest

from cityloops.schemas.auth_schema import REGISTER_MESSAGES, RegisterRequest
from cityloops.schemas.comment_schema import COMMENT_MESSAGES, CommentInput
from cityloops.schemas.loop_schema import LOOP_MESSAGES, LoopInput
from cityloops.schemas.validation import parse_payload
from cityloops.utils.exceptions import BadRequestError, ValidationFailedError


def _loop(**overrides):
    payload = {
        "title": "Harbour Walk",
        "description": "Along the water",
        "city": "Sydney",
        "places": [
            {
                "name": "Opera House",
                "description": "Iconic",
                "category": "Landmark",
                "mapUrl": "https://maps.google.com/?q=opera",
            }
        ],
    }
    payload.update(overrides)
    return payload


def _message(model, raw, messages):
    with pytest.raises(ValidationFailedError) as exc_info:
        parse_payload(model, raw, messages)
    return exc_info.value.message


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"title": "   "}, "Title is required"),
        ({"title": "x" * 101}, "Title must be at most 100 characters"),
        ({"description": ""}, "Description is required"),
        ({"city": ""}, "City is required"),
        ({"places": []}, "At least one place is required"),
        ({"places": "[]"}, "At least one place is required"),
        ({"places": "not json"}, "Places must be a JSON array"),
        ({"tags": ["x" * 51]}, "Tags must be at most 50 characters"),
    ],
)
def test_loop_input_reports_violation(overrides, expected):
    assert _message(LoopInput, _loop(**overrides), LOOP_MESSAGES) == expected


def test_loop_input_reports_only_first_violation():
    raw = _loop(title="", description="", city="")
    assert _message(LoopInput, raw, LOOP_MESSAGES) == "Title is required"


@pytest.mark.parametrize(
    "place_overrides, expected",
    [
        ({"name": ""}, "Place name is required"),
        ({"description": " "}, "Place description is required"),
        ({"category": ""}, "Category is required"),
        ({"mapUrl": "not a url"}, "Valid Google Maps URL is required"),
    ],
)
def test_place_violations(place_overrides, expected):
    raw = _loop()
    raw["places"] = [{**raw["places"][0], **place_overrides}]
    assert _message(LoopInput, raw, LOOP_MESSAGES) == expected


def test_loop_input_decodes_form_encoded_fields():
    raw = _loop(
        tags='["food", "food", " night "]',
        places='[{"name": "Stall", "description": "Noodles", "category": "Market",'
               ' "mapUrl": "https://maps.google.com/?q=stall"}]',
        coverImage=None,
    )
    data = parse_payload(LoopInput, raw, LOOP_MESSAGES)

    assert data.tags == ["food", "night"]
    assert data.places[0].map_url == "https://maps.google.com/?q=stall"
    assert data.cover_image == ""
    assert data.published is False


@pytest.mark.parametrize(
    "raw, expected",
    [
        ({"content": "", "loopId": 1, "userId": 1}, "Comment cannot be empty"),
        ({"content": "x" * 501, "loopId": 1, "userId": 1}, "Comment too long"),
        ({"content": "hi", "userId": 1}, "Loop ID is required"),
        ({"content": "hi", "loopId": 1}, "User ID is required"),
    ],
)
def test_comment_violations(raw, expected):
    assert _message(CommentInput, raw, COMMENT_MESSAGES) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ({"name": "J", "email": "j@example.com", "password": "Secretpass1"},
         "Name must be at least 2 characters"),
        ({"name": "Jane", "email": "nope", "password": "Secretpass1"},
         "Invalid email address"),
        ({"name": "Jane", "email": "j@example.com", "password": "Short1"},
         "Password must be at least 8 characters"),
        ({"name": "Jane", "email": "j@example.com", "password": "secretpass1"},
         "Password must contain at least one uppercase letter"),
        ({"name": "Jane", "email": "j@example.com", "password": "Secretpass"},
         "Password must contain at least one number"),
    ],
)
def test_register_violations(raw, expected):
    assert _message(RegisterRequest, raw, REGISTER_MESSAGES) == expected


def test_validation_failure_is_bad_request():
    assert issubclass(ValidationFailedError, BadRequestError)
