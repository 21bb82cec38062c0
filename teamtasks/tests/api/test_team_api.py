import pytest
from http import HTTPStatus

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from teamtasks.crud import team as crud_team
from teamtasks.crud.notification import get_notifications
from teamtasks.models.team import Team, TeamMember

TEAMS_ENDPOINT = "/teams"

@pytest.fixture
def test_team_by_user(db: Session, test_user, other_user) -> Team:
    return crud_team.create_team(
        db, {"name": "Backend", "description": "API people", "member_ids": [other_user.id]}, creator_id=test_user.id
    )

def test_create_team_success(client: TestClient, test_user, other_user, normal_user_token_headers, publisher):
    payload = {"name": "Frontend", "description": "UI folks", "member_ids": [other_user.id]}
    response = client.post(TEAMS_ENDPOINT, headers=normal_user_token_headers, json=payload)
    assert response.status_code == HTTPStatus.CREATED, response.text
    data = response.json()["data"]
    assert data["name"] == "Frontend"
    assert data["creator_id"] == test_user.id
    roles = {m["user_id"]: m["role"] for m in data["members"]}
    assert roles == {test_user.id: "admin", other_user.id: "member"}
    assert data["task_count"] == 0
    assert publisher.sent_to(test_user.id) == ["team-created"]
    assert publisher.sent_to(other_user.id) == ["team-created"]

def test_create_team_with_unknown_member_is_atomic(client: TestClient, db: Session, normal_user_token_headers):
    response = client.post(TEAMS_ENDPOINT, headers=normal_user_token_headers, json={"name": "Ghosts", "member_ids": [9999]})
    assert response.status_code == HTTPStatus.BAD_REQUEST, response.text
    assert db.query(Team).count() == 0
    assert db.query(TeamMember).count() == 0

def test_create_team_unauthenticated(client: TestClient):
    response = client.post(TEAMS_ENDPOINT, json={"name": "Unauth Team"})
    assert response.status_code == HTTPStatus.UNAUTHORIZED, response.text

def test_list_teams_only_own(client: TestClient, test_team_by_user, third_user, auth_headers, normal_user_token_headers):
    response = client.get(TEAMS_ENDPOINT, headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.OK, response.text
    assert [t["id"] for t in response.json()["data"]] == [test_team_by_user.id]

    response = client.get(TEAMS_ENDPOINT, headers=auth_headers(third_user))
    assert response.json()["data"] == []

def test_get_team_with_tasks(client: TestClient, test_team_by_user, normal_user_token_headers):
    client.post("/tasks", headers=normal_user_token_headers, json={
        "title": "Team task",
        "description": "For the team",
        "due_date": "2030-01-01T00:00:00Z",
        "priority": "LOW",
        "team_id": test_team_by_user.id,
    })
    response = client.get(f"{TEAMS_ENDPOINT}/{test_team_by_user.id}", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.OK, response.text
    data = response.json()["data"]
    assert data["task_count"] == 1
    assert data["tasks"][0]["title"] == "Team task"
    assert data["tasks"][0]["creator"]["name"] == "Alice"

def test_get_team_not_found(client: TestClient, normal_user_token_headers):
    response = client.get(f"{TEAMS_ENDPOINT}/99999", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.NOT_FOUND, response.text

def test_member_access_scenario(client: TestClient):
    """A регистрируется, создаёт команду, добавляет B; B видит команду, C получает 403."""
    tokens = {}
    ids = {}
    for name in ("Anna", "Boris", "Clara"):
        response = client.post("/auth/register", json={
            "email": f"{name.lower()}@example.com", "password": "secret1", "name": name,
        })
        assert response.status_code == HTTPStatus.CREATED, response.text
        tokens[name] = {"Authorization": f"Bearer {response.json()['data']['token']}"}
        ids[name] = response.json()["data"]["user"]["id"]
    # дальше работаем только через Bearer
    client.cookies.clear()

    response = client.post(TEAMS_ENDPOINT, headers=tokens["Anna"], json={"name": "G"})
    assert response.status_code == HTTPStatus.CREATED, response.text
    team_id = response.json()["data"]["id"]

    response = client.post(f"{TEAMS_ENDPOINT}/{team_id}/members", headers=tokens["Anna"], json={"user_id": ids["Boris"]})
    assert response.status_code == HTTPStatus.CREATED, response.text

    response = client.get(f"{TEAMS_ENDPOINT}/{team_id}", headers=tokens["Boris"])
    assert response.status_code == HTTPStatus.OK, response.text

    response = client.get(f"{TEAMS_ENDPOINT}/{team_id}", headers=tokens["Clara"])
    assert response.status_code == HTTPStatus.FORBIDDEN, response.text
    assert response.json() == {"success": False, "message": "You are not a member of this team"}

def test_update_team_admin_only(client: TestClient, test_team_by_user, other_user, auth_headers, normal_user_token_headers, publisher):
    response = client.put(f"{TEAMS_ENDPOINT}/{test_team_by_user.id}", headers=auth_headers(other_user), json={"name": "Hijacked"})
    assert response.status_code == HTTPStatus.FORBIDDEN, response.text

    response = client.put(f"{TEAMS_ENDPOINT}/{test_team_by_user.id}", headers=normal_user_token_headers, json={"name": "Backend v2"})
    assert response.status_code == HTTPStatus.OK, response.text
    assert response.json()["data"]["name"] == "Backend v2"
    assert publisher.sent_to(other_user.id) == ["team-updated"]

def test_delete_team_creator_only(client: TestClient, db: Session, test_team_by_user, other_user, auth_headers, normal_user_token_headers, publisher):
    team_id = test_team_by_user.id
    response = client.delete(f"{TEAMS_ENDPOINT}/{team_id}", headers=auth_headers(other_user))
    assert response.status_code == HTTPStatus.FORBIDDEN, response.text

    response = client.delete(f"{TEAMS_ENDPOINT}/{team_id}", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.OK, response.text
    assert db.query(Team).count() == 0
    assert publisher.sent_to(other_user.id) == ["team-deleted"]

def test_add_member_rules(client: TestClient, db: Session, test_team_by_user, other_user, third_user, auth_headers, normal_user_token_headers, publisher):
    url = f"{TEAMS_ENDPOINT}/{test_team_by_user.id}/members"

    response = client.post(url, headers=auth_headers(other_user), json={"user_id": third_user.id})
    assert response.status_code == HTTPStatus.FORBIDDEN, response.text

    response = client.post(url, headers=normal_user_token_headers, json={"user_id": 99999})
    assert response.status_code == HTTPStatus.NOT_FOUND, response.text

    response = client.post(url, headers=normal_user_token_headers, json={"user_id": other_user.id})
    assert response.status_code == HTTPStatus.CONFLICT, response.text

    response = client.post(url, headers=normal_user_token_headers, json={"user_id": third_user.id, "role": "admin"})
    assert response.status_code == HTTPStatus.CREATED, response.text
    assert response.json()["data"]["role"] == "admin"
    assert crud_team.is_admin(db, test_team_by_user.id, third_user.id)

    notifications = get_notifications(db, third_user.id)
    assert [n.type for n in notifications] == ["TEAM_MEMBER_ADDED"]
    assert "team-updated" in publisher.sent_to(third_user.id)

def test_creator_cannot_be_removed(client: TestClient, test_team_by_user, test_user, normal_user_token_headers):
    response = client.delete(f"{TEAMS_ENDPOINT}/{test_team_by_user.id}/members/{test_user.id}", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.BAD_REQUEST, response.text
    assert response.json()["message"] == "Cannot remove team creator"

def test_remove_member(client: TestClient, db: Session, test_team_by_user, test_user, other_user, third_user, normal_user_token_headers, publisher):
    url = f"{TEAMS_ENDPOINT}/{test_team_by_user.id}/members"
    response = client.delete(f"{url}/{other_user.id}", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.OK, response.text
    assert not crud_team.is_member(db, test_team_by_user.id, other_user.id)
    assert publisher.sent_to(other_user.id) == ["team-removed"]
    assert publisher.sent_to(test_user.id) == ["team-updated"]

    response = client.delete(f"{url}/{third_user.id}", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.NOT_FOUND, response.text

def test_invitation_flow(client: TestClient, db: Session, test_team_by_user, third_user, auth_headers, normal_user_token_headers, publisher):
    response = client.post(
        f"{TEAMS_ENDPOINT}/{test_team_by_user.id}/invitations",
        headers=normal_user_token_headers,
        json={"user_id": third_user.id, "message": "Come build APIs"},
    )
    assert response.status_code == HTTPStatus.CREATED, response.text
    invitation_id = response.json()["data"]["id"]
    assert publisher.sent_to(third_user.id) == ["team-invitation"]
    assert [n.type for n in get_notifications(db, third_user.id)] == ["TEAM_INVITATION"]

    response = client.get(f"{TEAMS_ENDPOINT}/invitations/me", headers=auth_headers(third_user))
    assert response.status_code == HTTPStatus.OK, response.text
    invitations = response.json()["data"]
    assert [i["id"] for i in invitations] == [invitation_id]
    assert invitations[0]["team"]["name"] == "Backend"
    assert invitations[0]["inviter"]["name"] == "Alice"

    # принять чужое приглашение нельзя
    response = client.post(f"{TEAMS_ENDPOINT}/invitations/{invitation_id}/accept", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.FORBIDDEN, response.text

    response = client.post(f"{TEAMS_ENDPOINT}/invitations/{invitation_id}/accept", headers=auth_headers(third_user))
    assert response.status_code == HTTPStatus.OK, response.text
    assert response.json()["data"]["status"] == "ACCEPTED"
    assert crud_team.is_member(db, test_team_by_user.id, third_user.id)

    response = client.post(f"{TEAMS_ENDPOINT}/invitations/{invitation_id}/reject", headers=auth_headers(third_user))
    assert response.status_code == HTTPStatus.BAD_REQUEST, response.text

def test_invite_existing_member_conflict(client: TestClient, test_team_by_user, other_user, normal_user_token_headers):
    response = client.post(
        f"{TEAMS_ENDPOINT}/{test_team_by_user.id}/invitations",
        headers=normal_user_token_headers,
        json={"user_id": other_user.id},
    )
    assert response.status_code == HTTPStatus.CONFLICT, response.text

def test_reject_invitation(client: TestClient, db: Session, test_team_by_user, third_user, auth_headers, normal_user_token_headers):
    response = client.post(
        f"{TEAMS_ENDPOINT}/{test_team_by_user.id}/invitations",
        headers=normal_user_token_headers,
        json={"user_id": third_user.id},
    )
    invitation_id = response.json()["data"]["id"]
    response = client.post(f"{TEAMS_ENDPOINT}/invitations/{invitation_id}/reject", headers=auth_headers(third_user))
    assert response.status_code == HTTPStatus.OK, response.text
    assert response.json()["data"]["status"] == "REJECTED"
    assert not crud_team.is_member(db, test_team_by_user.id, third_user.id)

def test_unknown_invitation(client: TestClient, normal_user_token_headers):
    response = client.post(f"{TEAMS_ENDPOINT}/invitations/4040/accept", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.NOT_FOUND, response.text
