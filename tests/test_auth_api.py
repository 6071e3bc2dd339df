from conftest import auth_header

from finance_tracker.core.security import get_password_hash
from finance_tracker.models.user import UserInDB, UserRole


def test_register_returns_token_and_user(client, store):
    response = client.post(
        "/api/auth/register",
        json={"username": "carol", "email": "carol@example.com", "password": "secret123", "name": "Carol"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "user"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "carol@example.com"


def test_register_ignores_requested_role(client, store):
    response = client.post(
        "/api/auth/register",
        json={
            "username": "mallory",
            "email": "mallory@example.com",
            "password": "secret123",
            "name": "Mallory",
            "role": "admin",
        },
    )
    assert response.status_code == 201
    assert response.json()["user"]["role"] == "user"


def test_register_duplicate_email(client, store, user):
    response = client.post(
        "/api/auth/register",
        json={"username": "alice2", "email": user.email, "password": "secret123", "name": "Alice"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


def test_login(client, store):
    store.put_user(
        UserInDB(
            username="dave",
            email="dave@example.com",
            name="Dave",
            role=UserRole.USER,
            password_hash=get_password_hash("correct-horse"),
        )
    )
    ok = client.post("/api/auth/login", json={"email": "dave@example.com", "password": "correct-horse"})
    assert ok.status_code == 200
    assert ok.json()["user"]["username"] == "dave"

    bad = client.post("/api/auth/login", json={"email": "dave@example.com", "password": "wrong"})
    assert bad.status_code == 401
    unknown = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "wrong"})
    assert unknown.status_code == 401


def test_token_for_deleted_user_is_rejected(client, store, user):
    headers = auth_header(user)
    del store.users[user.user_id]
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_categories_listing_and_admin_creation(client, store, user, admin):
    listed = client.get("/api/categories", headers=auth_header(user))
    assert listed.status_code == 200
    assert len(listed.json()) == 11

    new_category = {"name": "Pets", "icon": "fas fa-paw", "color": "#123456", "type": "expense"}
    assert client.post("/api/categories", json=new_category, headers=auth_header(user)).status_code == 403

    created = client.post("/api/categories", json=new_category, headers=auth_header(admin))
    assert created.status_code == 201
    assert created.json()["name"] == "Pets"

    duplicate = client.post("/api/categories", json=new_category, headers=auth_header(admin))
    assert duplicate.status_code == 400


def test_admin_user_listing(client, user, admin):
    assert client.get("/api/admin/users", headers=auth_header(user)).status_code == 403
    response = client.get("/api/admin/users", headers=auth_header(admin))
    assert response.status_code == 200
    emails = {u["email"] for u in response.json()}
    assert emails == {user.email, admin.email}
    assert all("password_hash" not in u for u in response.json())
