import pytest

from conftest import auth


@pytest.fixture
def order_id(customer_token, make_product, place_order):
    product_id = make_product(quantity=10, price=400.0)
    return place_order(customer_token, [{"product": product_id, "quantity": 2}]).get_json()["order"]["id"]


CARD = {"card_number": "4242 4242 4242 4242", "card_holder_name": "Kamal Silva", "expiry_date": "12/29"}


def test_card_payment_completes_and_links_order(client, customer_token, order_id):
    res = client.post("/api/payments/create-intent", headers=auth(customer_token), json={
        "order": order_id, "payment_method": "card", "card_details": CARD,
    })
    assert res.status_code == 201
    data = res.get_json()
    assert data["message"] == "Payment processed successfully"
    payment = data["payment"]
    assert payment["status"] == "completed"
    assert payment["amount"] == 800.0
    assert payment["currency"] == "lkr"
    assert payment["payment_id"].startswith("pi_") and len(payment["payment_id"]) == 12
    assert payment["card_details"] == {"last4": "4242", "card_holder_name": "Kamal Silva", "expiry_date": "12/29"}

    order = client.get(f"/api/orders/{order_id}", headers=auth(customer_token)).get_json()["order"]
    assert order["payment_method"] == "Card"
    assert order["payment_details"] == {"payment_id": data["payment_id"], "status": "completed"}


def test_cash_on_delivery_stays_pending(client, customer_token, order_id):
    res = client.post("/api/payments/create-intent", headers=auth(customer_token), json={
        "order": order_id, "payment_method": "cod",
    })
    assert res.status_code == 201
    assert res.get_json()["payment"]["status"] == "pending"
    assert res.get_json()["payment"]["card_details"] is None


def test_card_payment_needs_card_details(client, customer_token, order_id):
    res = client.post("/api/payments/create-intent", headers=auth(customer_token), json={
        "order": order_id, "payment_method": "card",
    })
    assert res.status_code == 400
    assert res.get_json()["message"] == "Card details are required for card payments"


def test_paid_order_cannot_be_paid_again(client, customer_token, order_id):
    body = {"order": order_id, "payment_method": "card", "card_details": CARD}
    assert client.post("/api/payments/create-intent", headers=auth(customer_token), json=body).status_code == 201
    assert client.post("/api/payments/create-intent", headers=auth(customer_token), json=body).status_code == 400


def test_payment_for_unknown_order(client, customer_token):
    res = client.post("/api/payments/create-intent", headers=auth(customer_token), json={
        "order": 404, "payment_method": "cod",
    })
    assert res.status_code == 404


def test_cannot_pay_for_someone_elses_order(client, make_user, token_for, order_id):
    stranger = token_for(make_user("stranger@medcare.io"))
    res = client.post("/api/payments/create-intent", headers=auth(stranger), json={
        "order": order_id, "payment_method": "cod",
    })
    assert res.status_code == 403


def test_payment_access_and_status_update(client, admin_token, customer_token, make_user, token_for, order_id):
    payment_id = client.post("/api/payments/create-intent", headers=auth(customer_token), json={
        "order": order_id, "payment_method": "cod",
    }).get_json()["payment_id"]

    assert client.get(f"/api/payments/{payment_id}", headers=auth(customer_token)).status_code == 200
    stranger = token_for(make_user("stranger@medcare.io"))
    assert client.get(f"/api/payments/{payment_id}", headers=auth(stranger)).status_code == 403
    assert client.get("/api/payments/", headers=auth(customer_token)).status_code == 403
    assert client.get("/api/payments/", headers=auth(admin_token)).get_json()["count"] == 1

    res = client.put(f"/api/payments/{payment_id}/status", headers=auth(admin_token), json={"status": "completed"})
    assert res.status_code == 200
    assert res.get_json()["payment"]["status"] == "completed"
    order = client.get(f"/api/orders/{order_id}", headers=auth(admin_token)).get_json()["order"]
    assert order["payment_details"]["status"] == "completed"

    res = client.put(f"/api/payments/{payment_id}/status", headers=auth(admin_token), json={"status": "lost"})
    assert res.status_code == 400
