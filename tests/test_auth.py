from conftest import auth


def register(client, **overrides):
    body = {"first_name": "Nadee", "last_name": "Fernando", "email": "nadee@medcare.io", "password": "secret123"}
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


def test_register_returns_user_and_token(client):
    res = register(client)
    assert res.status_code == 201
    data = res.get_json()
    assert data["success"] is True
    assert data["user"]["email"] == "nadee@medcare.io"
    assert data["user"]["role"] == "customer"
    assert data["token"]


def test_register_rejects_duplicate_email(client):
    register(client)
    res = register(client, email="NADEE@medcare.io")
    assert res.status_code == 400
    data = res.get_json()
    assert data["success"] is False
    assert data["message"] == "Email already exists"
    assert "stack" in data


def test_register_validates_fields(client):
    res = register(client, email="not-an-email")
    assert res.status_code == 400
    assert res.get_json()["message"].startswith("email:")

    res = register(client, password="123")
    assert res.status_code == 400
    assert res.get_json()["message"].startswith("password:")


def test_login_and_me(client):
    register(client)
    res = client.post("/api/auth/login", json={"email": "nadee@medcare.io", "password": "secret123"})
    assert res.status_code == 200
    token = res.get_json()["token"]

    me = client.get("/api/auth/me", headers=auth(token))
    assert me.status_code == 200
    assert me.get_json()["user"]["first_name"] == "Nadee"


def test_login_with_wrong_password(client):
    register(client)
    res = client.post("/api/auth/login", json={"email": "nadee@medcare.io", "password": "wrong-pass"})
    assert res.status_code == 401
    assert res.get_json()["message"] == "Invalid email or password"


def test_inactive_user_cannot_log_in(client, make_user):
    make_user("sleepy@medcare.io", is_active=False)
    res = client.post("/api/auth/login", json={"email": "sleepy@medcare.io", "password": "secret123"})
    assert res.status_code == 403


def test_missing_or_bad_token(client):
    assert client.get("/api/auth/me").status_code == 401
    res = client.get("/api/auth/me", headers=auth("garbage"))
    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_update_profile(client, customer_token):
    res = client.put("/api/auth/update", headers=auth(customer_token), json={"phone": "0711111111"})
    assert res.status_code == 200
    assert res.get_json()["user"]["phone"] == "0711111111"


def test_delete_own_account(client, customer_token):
    res = client.delete("/api/auth/delete", headers=auth(customer_token))
    assert res.status_code == 200
    # The token no longer resolves to a user
    assert client.get("/api/auth/me", headers=auth(customer_token)).status_code == 401


def test_user_management_requires_admin(client, customer_token, admin_token):
    assert client.get("/api/auth/users", headers=auth(customer_token)).status_code == 403

    res = client.get("/api/auth/users", headers=auth(admin_token))
    assert res.status_code == 200
    assert res.get_json()["count"] == 2


def test_admin_creates_updates_and_deletes_user(client, admin_token):
    res = client.post("/api/auth/users", headers=auth(admin_token), json={
        "first_name": "Ruwan", "last_name": "Jayasuriya", "email": "ruwan@medcare.io",
        "password": "secret123", "role": "supplier", "company_name": "Ruwan Medical",
    })
    assert res.status_code == 201
    user_id = res.get_json()["user"]["id"]

    res = client.put(f"/api/auth/users/{user_id}", headers=auth(admin_token), json={"is_active": False})
    assert res.status_code == 200
    assert res.get_json()["user"]["is_active"] is False

    assert client.delete(f"/api/auth/users/{user_id}", headers=auth(admin_token)).status_code == 200
    assert client.get(f"/api/auth/users/{user_id}", headers=auth(admin_token)).status_code == 404


def test_admin_cannot_demote_self(client, app, admin_token):
    me = client.get("/api/auth/me", headers=auth(admin_token)).get_json()["user"]
    res = client.put(f"/api/auth/users/{me['id']}", headers=auth(admin_token), json={"role": "customer"})
    assert res.status_code == 400


def test_user_with_orders_cannot_be_deleted(client, admin_token, customer_id, customer_token, make_product, place_order):
    product_id = make_product(quantity=5)
    assert place_order(customer_token, [{"product": product_id, "quantity": 1}]).status_code == 201
    res = client.delete(f"/api/auth/users/{customer_id}", headers=auth(admin_token))
    assert res.status_code == 400


def test_public_registration_cannot_pick_admin_role(client):
    res = register(client, role="admin")
    assert res.status_code == 201
    assert res.get_json()["user"]["role"] == "customer"
