import pytest
from http import HTTPStatus
from datetime import datetime, timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from teamtasks.crud import notification as crud_notification

NOTIFICATIONS_ENDPOINT = "/notifications"

@pytest.fixture
def own_notifications(db: Session, test_user):
    return [
        crud_notification.create_notification(db, test_user.id, "First", type="TASK_ASSIGNED"),
        crud_notification.create_notification(db, test_user.id, "Second", type="TEAM_INVITATION"),
    ]

def test_list_notifications(client: TestClient, own_notifications, normal_user_token_headers):
    response = client.get(NOTIFICATIONS_ENDPOINT, headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.OK, response.text
    data = response.json()["data"]
    assert [n["message"] for n in data] == ["Second", "First"]
    assert all(n["read"] is False for n in data)

def test_mark_as_read(client: TestClient, own_notifications, normal_user_token_headers):
    target = own_notifications[0]
    response = client.put(f"{NOTIFICATIONS_ENDPOINT}/{target.id}/read", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.OK, response.text
    assert response.json()["data"]["read"] is True

    response = client.get(NOTIFICATIONS_ENDPOINT, headers=normal_user_token_headers, params={"unread_only": True})
    assert [n["id"] for n in response.json()["data"]] == [own_notifications[1].id]

def test_mark_all_as_read(client: TestClient, own_notifications, normal_user_token_headers):
    response = client.put(f"{NOTIFICATIONS_ENDPOINT}/read-all", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.OK, response.text
    assert response.json()["message"] == "Marked 2 notifications as read"

def test_delete_notification(client: TestClient, own_notifications, normal_user_token_headers):
    response = client.delete(f"{NOTIFICATIONS_ENDPOINT}/{own_notifications[0].id}", headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.OK, response.text
    response = client.get(NOTIFICATIONS_ENDPOINT, headers=normal_user_token_headers)
    assert len(response.json()["data"]) == 1

def test_clear_all(client: TestClient, own_notifications, normal_user_token_headers):
    response = client.delete(NOTIFICATIONS_ENDPOINT, headers=normal_user_token_headers)
    assert response.status_code == HTTPStatus.OK, response.text
    assert response.json()["message"] == "Cleared 2 notifications"
    response = client.get(NOTIFICATIONS_ENDPOINT, headers=normal_user_token_headers)
    assert response.json()["data"] == []

def test_other_users_notifications_are_invisible(client: TestClient, own_notifications, other_user, auth_headers):
    headers = auth_headers(other_user)
    target = own_notifications[0]

    response = client.get(NOTIFICATIONS_ENDPOINT, headers=headers)
    assert response.json()["data"] == []

    response = client.put(f"{NOTIFICATIONS_ENDPOINT}/{target.id}/read", headers=headers)
    assert response.status_code == HTTPStatus.NOT_FOUND, response.text

    response = client.delete(f"{NOTIFICATIONS_ENDPOINT}/{target.id}", headers=headers)
    assert response.status_code == HTTPStatus.NOT_FOUND, response.text

    response = client.delete(NOTIFICATIONS_ENDPOINT, headers=headers)
    assert response.json()["message"] == "Cleared 0 notifications"

def test_notifications_require_auth(client: TestClient):
    response = client.get(NOTIFICATIONS_ENDPOINT)
    assert response.status_code == HTTPStatus.UNAUTHORIZED, response.text

def test_notification_timestamps_are_utc(client: TestClient, own_notifications, normal_user_token_headers):
    data = client.get(NOTIFICATIONS_ENDPOINT, headers=normal_user_token_headers).json()["data"]
    created_at = datetime.fromisoformat(data[0]["created_at"].replace("Z", "+00:00"))
    assert created_at.utcoffset() == timedelta(0)
