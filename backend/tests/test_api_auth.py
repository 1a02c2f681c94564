from inkwell.models import Story
from tests.conftest import auth_headers, login_user, register_user


def test_register_and_login(client):
	resp = register_user(client, username="alice")
	assert resp.status_code == 201
	login = login_user(client, "alice")
	assert login.status_code == 200
	assert login.json()["token_type"] == "bearer"

	me = client.get("/auth/me", headers={"Authorization": f"Bearer {login.json()['access_token']}"})
	assert me.status_code == 200
	assert me.json()["username"] == "alice"


def test_register_conflict(client):
	assert register_user(client, username="bob").status_code == 201
	assert register_user(client, username="bob").status_code == 409


def test_register_invalid_input(client):
	resp = client.post("/auth/register", json={"username": "x"})
	assert resp.status_code == 400


def test_login_wrong_password(client):
	register_user(client, username="carol")
	assert login_user(client, "carol", password="nope").status_code == 401


def test_invalid_token_rejected(client):
	resp = client.get("/user", headers={"Authorization": "Bearer not-a-token"})
	assert resp.status_code == 401


def test_list_users_hides_password_hash(client):
	headers = auth_headers(client, username="dave")
	resp = client.get("/user", headers=headers)
	assert resp.status_code == 200
	users = resp.json()
	assert [u["username"] for u in users] == ["dave"]
	assert "password_hash" not in users[0]


def test_list_stories(client, db):
	db.add(Story(title="The Fox", content="A quick brown fox."))
	db.commit()
	headers = auth_headers(client)
	resp = client.get("/stories", headers=headers)
	assert resp.status_code == 200
	assert [s["title"] for s in resp.json()] == ["The Fox"]


def test_health(client):
	resp = client.get("/health")
	assert resp.status_code == 200
	assert resp.json()["status"] == "ok"
