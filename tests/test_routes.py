from datetime import timedelta

import pytest

from nexus.elections import utils
from nexus.elections.model.enums import CandidateStatusEnum, ElectionStatusEnum

from tests.factories import auth_header, make_candidate, make_election


def election_body(**kwargs):
    start = utils.tz_now() + timedelta(days=1)
    body = {
        "title": "Student Council 2026",
        "description": "Yearly election of the student council",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=7)).isoformat(),
        "positions": ["President", "Treasurer"],
    }
    body.update(kwargs)
    return body


def test_list_elections_anonymously(client, election):
    response = client.get("/elections")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [e["id"] for e in body["data"]] == [election.id]


def test_create_election_requires_token(client):
    response = client.post("/elections", json=election_body())

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_create_election_with_bad_token(client):
    response = client.post("/elections", json=election_body(), headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_create_election(client, faculty):
    response = client.post("/elections", json=election_body(), headers=auth_header(faculty))

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Election created successfully"
    assert body["data"]["status"] == "upcoming"
    assert body["data"]["created_by"] == faculty.id


def test_create_election_as_student_is_forbidden(client, student):
    response = client.post("/elections", json=election_body(), headers=auth_header(student))

    assert response.status_code == 403
    assert response.json() == {
        "success": False,
        "message": "Only administrators and faculty can create elections",
    }


def test_invalid_election_body_lists_errors(client, admin):
    response = client.post(
        "/elections", json=election_body(title="Vote", positions=[]), headers=auth_header(admin)
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert {error["field"] for error in body["errors"]} >= {"title", "positions"}


def test_unknown_election_is_404(client):
    response = client.get("/elections/missing")

    assert response.status_code == 404
    assert response.json()["message"] == "Election with ID missing not found"


def test_private_election_is_404_for_other_users(client, session, faculty, student):
    private = make_election(session, faculty, is_public=False)

    assert client.get(f"/elections/{private.id}").status_code == 404
    assert client.get(f"/elections/{private.id}", headers=auth_header(student)).status_code == 404

    response = client.get(f"/elections/{private.id}", headers=auth_header(faculty))
    assert response.status_code == 200
    assert response.json()["data"]["id"] == private.id


def test_scenario_apply_approve_vote(client, admin, faculty, student, other_student):
    created = client.post("/elections", json=election_body(), headers=auth_header(faculty)).json()["data"]
    election_id = created["id"]

    applied = client.post(
        f"/elections/{election_id}/candidates",
        json={"position": "President", "manifesto": "Longer library opening hours"},
        headers=auth_header(other_student),
    )
    assert applied.status_code == 201
    candidate_id = applied.json()["data"]["id"]
    assert applied.json()["data"]["status"] == "pending"

    approved = client.patch(f"/candidates/{candidate_id}/approve", headers=auth_header(faculty))
    assert approved.status_code == 200
    assert approved.json()["data"]["status"] == "approved"

    early = client.post(
        f"/elections/{election_id}/votes", json={"candidate_id": candidate_id}, headers=auth_header(student)
    )
    assert early.status_code == 400

    assert client.post(f"/elections/{election_id}/start", headers=auth_header(faculty)).status_code == 200

    vote = client.post(
        f"/elections/{election_id}/votes", json={"candidate_id": candidate_id}, headers=auth_header(student)
    )
    assert vote.status_code == 201

    again = client.post(
        f"/elections/{election_id}/votes", json={"candidate_id": candidate_id}, headers=auth_header(student)
    )
    assert again.status_code == 409
    assert again.json()["message"] == "You have already voted in this election"

    voted = client.get(f"/elections/{election_id}/has-voted", headers=auth_header(student)).json()["data"]
    assert voted == {"has_voted": True, "candidate_id": candidate_id}

    assert client.get(f"/elections/{election_id}/results").status_code == 400
    assert client.post(f"/elections/{election_id}/end", headers=auth_header(faculty)).status_code == 200

    results = client.get(f"/elections/{election_id}/results").json()["data"]
    assert results["total_votes"] == 1
    assert results["candidates"][0]["percentage"] == 100.0


def test_duplicate_application_conflicts(client, election, student):
    url = f"/elections/{election.id}/candidates"
    body = {"position": "President", "manifesto": "Longer library opening hours"}

    assert client.post(url, json=body, headers=auth_header(student)).status_code == 201
    response = client.post(url, json=body, headers=auth_header(student))
    assert response.status_code == 409


def test_reject_with_reason(client, election, student, admin):
    response = client.post(
        f"/elections/{election.id}/candidates",
        json={"position": "President", "manifesto": "Longer library opening hours"},
        headers=auth_header(student),
    )
    candidate = response.json()["data"]

    rejected = client.patch(
        f"/candidates/{candidate['id']}/reject",
        json={"reason": "incomplete manifesto"},
        headers=auth_header(admin),
    )
    assert rejected.status_code == 200
    assert rejected.json()["data"]["rejection_reason"] == "incomplete manifesto"

    approved = client.patch(f"/candidates/{candidate['id']}/approve", headers=auth_header(admin))
    assert approved.status_code == 409
    assert approved.json()["message"] == "This application has already been rejected"


def test_admins_cannot_vote(client, active_election, approved_candidate, admin):
    response = client.post(
        f"/elections/{active_election.id}/votes",
        json={"candidate_id": approved_candidate.id},
        headers=auth_header(admin),
    )
    assert response.status_code == 403


def test_candidate_list_hides_pending_from_anonymous(client, session, election, student, other_student):
    make_candidate(session, election, student, status=CandidateStatusEnum.pending)
    approved = make_candidate(session, election, other_student)

    response = client.get(f"/elections/{election.id}/candidates")
    assert [c["id"] for c in response.json()["data"]] == [approved.id]


def test_permissions_for_caller(client, election, faculty, other_faculty):
    mine = client.get(
        "/permissions/election", params={"record_id": election.id}, headers=auth_header(faculty)
    ).json()["data"]
    theirs = client.get(
        "/permissions/election", params={"record_id": election.id}, headers=auth_header(other_faculty)
    ).json()["data"]

    assert mine["update"] is True
    assert theirs["update"] is False
    assert theirs["create"] is True


@pytest.mark.parametrize("kind,expected", [
    ("vote", {"create": True, "read": True}),
    ("facility", {}),
])
def test_permissions_without_record(client, student, kind, expected):
    response = client.get(f"/permissions/{kind}", headers=auth_header(student))
    assert response.json()["data"] == expected


def test_election_logs_route(client, session, faculty, student):
    election = make_election(session, faculty, status=ElectionStatusEnum.upcoming)
    client.post(f"/elections/{election.id}/start", headers=auth_header(faculty))

    response = client.get(f"/elections/{election.id}/logs", headers=auth_header(faculty))
    assert response.status_code == 200
    assert [log["event"] for log in response.json()["data"]] == ["voting_started"]

    assert client.get(f"/elections/{election.id}/logs", headers=auth_header(student)).status_code == 403
