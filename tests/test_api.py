# tests/test_api.py
"""Tests for the HTTP endpoints and the error-to-status mapping."""

import uuid

import pytest
from fastapi import status

from litterpick.api.errors import status_for
from litterpick.core import errors


def _create(client, headers, **overrides):
    payload = {"latitude": 51.50, "longitude": -0.12, "photo_before": "b1"}
    payload.update(overrides)
    return client.post("/api/v1/reports/", json=payload, headers=headers)


def test_create_and_fetch_report(client, make_user, auth_headers) -> None:
    reporter = make_user()
    response = _create(client, auth_headers(reporter), description="Crisp packets")

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["status"] == "pending"
    assert body["reporter_id"] == str(reporter.id)

    fetched = client.get(f"/api/v1/reports/{body['id']}")
    assert fetched.status_code == status.HTTP_200_OK
    assert fetched.json()["description"] == "Crisp packets"


def test_create_requires_identity(client) -> None:
    response = client.post("/api/v1/reports/", json={"latitude": 1.0, "longitude": 1.0})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_create_requires_verified_email(client, make_user, auth_headers) -> None:
    response = _create(client, auth_headers(make_user(), email_verified=False))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"] == "email_not_verified"


def test_create_rejects_out_of_range_coordinates(client, make_user, auth_headers) -> None:
    response = _create(client, auth_headers(make_user()), latitude=120.0)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT


def test_list_my_reports_and_clears(client, make_user, make_report, cleared_report, clock, auth_headers) -> None:
    reporter, picker = make_user(), make_user()
    first = make_report(reporter, 10.0, 10.0)
    clock.advance(minutes=5)
    second = cleared_report(reporter, picker, 20.0, 20.0)
    clock.advance(minutes=5)
    latest_clear = cleared_report(picker, reporter, 30.0, 30.0)

    mine = client.get("/api/v1/reports/mine", headers=auth_headers(reporter))
    assert mine.status_code == status.HTTP_200_OK
    assert [r["id"] for r in mine.json()] == [str(second.id), str(first.id)]

    cleared = client.get("/api/v1/reports/cleared", headers=auth_headers(picker))
    assert cleared.status_code == status.HTTP_200_OK
    assert [r["id"] for r in cleared.json()] == [str(second.id)]
    assert cleared.json()[0]["status"] == "cleared"

    others = client.get("/api/v1/reports/cleared", headers=auth_headers(reporter))
    assert [r["id"] for r in others.json()] == [str(latest_clear.id)]


def test_list_my_reports_requires_identity(client) -> None:
    assert client.get("/api/v1/reports/mine").status_code == status.HTTP_401_UNAUTHORIZED


def test_unknown_report_is_404(client) -> None:
    response = client.get(f"/api/v1/reports/{uuid.uuid4()}")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == "report_not_found"


def test_claim_clear_flow(client, make_user, auth_headers) -> None:
    reporter, picker, other = make_user(), make_user(), make_user()
    report_id = _create(client, auth_headers(reporter)).json()["id"]

    claimed = client.post(f"/api/v1/reports/{report_id}/claim", headers=auth_headers(picker))
    assert claimed.status_code == status.HTTP_200_OK
    assert claimed.json()["claimed_by"] == str(picker.id)

    again = client.post(f"/api/v1/reports/{report_id}/claim", headers=auth_headers(other))
    assert again.status_code == status.HTTP_409_CONFLICT
    assert again.json()["error"] == "already_claimed"

    stolen = client.post(
        f"/api/v1/reports/{report_id}/clear",
        json={"photo_after": "p1"},
        headers=auth_headers(other),
    )
    assert stolen.status_code == status.HTTP_403_FORBIDDEN

    cleared = client.post(
        f"/api/v1/reports/{report_id}/clear",
        json={"photo_after": "p1"},
        headers=auth_headers(picker),
    )
    assert cleared.status_code == status.HTTP_200_OK
    body = cleared.json()
    assert body["report"]["status"] == "cleared"
    assert body["points_awarded"] > 0

    score = client.get(f"/api/v1/users/{picker.id}/score")
    assert score.status_code == status.HTTP_200_OK
    assert score.json()["total_clears"] == 1
    assert score.json()["total_points"] == body["points_awarded"]


def test_clear_requires_photo(client, make_user, auth_headers) -> None:
    reporter, picker = make_user(), make_user()
    report_id = _create(client, auth_headers(reporter)).json()["id"]
    client.post(f"/api/v1/reports/{report_id}/claim", headers=auth_headers(picker))

    response = client.post(
        f"/api/v1/reports/{report_id}/clear",
        json={"photo_after": ""},
        headers=auth_headers(picker),
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT


def test_release_claim(client, make_user, auth_headers) -> None:
    reporter, picker = make_user(), make_user()
    report_id = _create(client, auth_headers(reporter)).json()["id"]
    client.post(f"/api/v1/reports/{report_id}/claim", headers=auth_headers(picker))

    response = client.post(f"/api/v1/reports/{report_id}/release", headers=auth_headers(picker))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "pending"
    assert response.json()["claimed_by"] is None


def test_verification_endpoints(client, make_user, cleared_report, experienced_user, auth_headers) -> None:
    report = cleared_report(make_user(), make_user())
    voter = experienced_user()
    novice = experienced_user(clears=1)

    rejected = client.post(
        f"/api/v1/reports/{report.id}/verifications",
        json={"is_positive": True},
        headers=auth_headers(novice),
    )
    assert rejected.status_code == status.HTTP_403_FORBIDDEN
    assert rejected.json()["error"] == "insufficient_experience"

    missing_comment = client.post(
        f"/api/v1/reports/{report.id}/verifications",
        json={"is_positive": False},
        headers=auth_headers(voter),
    )
    assert missing_comment.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
    assert missing_comment.json()["error"] == "comment_required"

    cast = client.post(
        f"/api/v1/reports/{report.id}/verifications",
        json={"is_positive": True, "comment": "Looks spotless"},
        headers=auth_headers(voter),
    )
    assert cast.status_code == status.HTTP_201_CREATED
    outcome = cast.json()
    assert outcome["verification_count_positive"] == 1
    assert outcome["report_status"] == "cleared"
    assert outcome["reached_consensus"] is False

    duplicate = client.post(
        f"/api/v1/reports/{report.id}/verifications",
        json={"is_positive": True},
        headers=auth_headers(voter),
    )
    assert duplicate.status_code == status.HTTP_409_CONFLICT

    listed = client.get(f"/api/v1/reports/{report.id}/verifications")
    assert listed.status_code == status.HTTP_200_OK
    assert [v["voter_id"] for v in listed.json()] == [str(voter.id)]


def test_vote_on_pending_report(client, make_user, make_report, experienced_user, auth_headers) -> None:
    report = make_report(make_user())
    response = client.post(
        f"/api/v1/reports/{report.id}/verifications",
        json={"is_positive": True},
        headers=auth_headers(experienced_user()),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "not_clearable"


def test_leaderboard_endpoint(client, make_user, cleared_report) -> None:
    reporter = make_user()
    picker = make_user("picker", city="Leeds")
    cleared_report(reporter, picker)

    response = client.get("/api/v1/leaderboards/", params={"scope": "city", "region": "leeds"})

    assert response.status_code == status.HTTP_200_OK
    entries = response.json()
    assert len(entries) == 1
    assert entries[0]["display_name"] == "picker"
    assert entries[0]["rank"] == 1


@pytest.mark.parametrize(
    "params",
    [{"scope": "galaxy"}, {"period": "daily"}, {"scope": "city"}, {"limit": 5000}],
)
def test_leaderboard_invalid_query(client, params) -> None:
    response = client.get("/api/v1/leaderboards/", params=params)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "invalid_query"


def test_score_for_user_without_activity(client, make_user) -> None:
    user = make_user()
    response = client.get(f"/api/v1/users/{user.id}/score")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["total_points"] == 0


def test_score_for_unknown_user(client) -> None:
    response = client.get(f"/api/v1/users/{uuid.uuid4()}/score")
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (errors.ReportNotFound(), 404),
        (errors.AlreadyClaimed(), 409),
        (errors.IllegalTransition(), 409),
        (errors.NotOwner(), 403),
        (errors.InsufficientExperience(), 403),
        (errors.DuplicateVote(), 409),
        (errors.CommentRequired(), 422),
        (errors.SelfVerification(), 400),
        (errors.NotClearable(), 400),
        (errors.EmailNotVerified(), 403),
        (errors.StoreUnavailable(), 503),
    ],
)
def test_status_for(error, expected) -> None:
    assert status_for(error) == expected


def test_store_unavailable_is_retryable() -> None:
    assert errors.StoreUnavailable().retryable
    assert not errors.AlreadyClaimed().retryable
