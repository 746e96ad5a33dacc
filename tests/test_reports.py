from datetime import date, timedelta

import pytest

from medcare.reports import render_table_report
from conftest import auth


def test_render_table_report_produces_pdf():
    pdf = render_table_report("Sample Report", ["Name", "Qty"], [["Gauze", 3], ["Plaster", 10]])
    assert pdf.startswith(b"%PDF")


@pytest.mark.parametrize("kind", ["users", "suppliers", "products", "orders", "payments", "product-analytics"])
def test_report_endpoints_return_pdf(client, admin_token, customer_token, supplier_id, make_product, place_order, kind):
    product_id = make_product(supplier_id=supplier_id)
    place_order(customer_token, [{"product": product_id, "quantity": 1}])

    res = client.get(f"/api/reports/{kind}", headers=auth(admin_token))
    assert res.status_code == 200
    assert res.mimetype == "application/pdf"
    assert res.data.startswith(b"%PDF")
    assert f"{kind}-report-" in res.headers["Content-Disposition"]


def test_unknown_report(client, admin_token):
    res = client.get("/api/reports/secrets", headers=auth(admin_token))
    assert res.status_code == 404
    assert res.get_json()["message"] == "Unknown report: secrets"


def test_reports_are_admin_only(client, customer_token):
    assert client.get("/api/reports/users", headers=auth(customer_token)).status_code == 403


def test_dashboard_overview(client, admin_token, customer_token, make_product, place_order):
    soon = make_product(name="Expiring Drops", expiry_date=date.today() + timedelta(days=5))
    make_product(name="Bandage", category="First Aid")
    place_order(customer_token, [{"product": soon, "quantity": 2}])

    res = client.get("/api/dashboard/overview", headers=auth(admin_token))
    assert res.status_code == 200
    overview = res.get_json()["overview"]
    assert overview["total_users"] == 2
    assert overview["total_orders"] == 1
    assert overview["total_revenue"] == 200.0
    assert overview["total_products"] == 2
    assert [p["name"] for p in overview["expiring_products"]] == ["Expiring Drops"]
    assert overview["recent_orders"][0]["customer"] == "Kamal Silva"
    assert {c["category"]: c["count"] for c in overview["category_distribution"]} == {"Medicines": 1, "First Aid": 1}


def test_dashboard_requires_admin(client, customer_token):
    assert client.get("/api/dashboard/overview", headers=auth(customer_token)).status_code == 403


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json()["success"] is True
