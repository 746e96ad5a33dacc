from datetime import date, timedelta

from medcare.models import Product, SupplierProduct, markup_price
from medcare.reports import product_analytics, category_distribution


def test_markup_is_fifteen_percent():
    assert markup_price(100) == 115.0
    assert markup_price(19.99) == 22.99
    assert markup_price(0) == 0.0


def test_supplier_product_selling_price_is_formatted():
    item = SupplierProduct(name="Gauze", category="First Aid", brand="3M",
                           buying_price=100, selling_price=markup_price(100))
    assert item.to_dict()["selling_price"] == "115.00"


def test_set_quantity_keeps_out_of_stock_in_sync():
    product = Product(quantity=3, out_of_stock=False)
    product.set_quantity(0)
    assert product.out_of_stock is True
    product.set_quantity(7)
    assert product.quantity == 7
    assert product.out_of_stock is False


def test_restock_updates_last_restocked():
    product = Product(quantity=0, out_of_stock=True, last_restocked=None)
    product.set_quantity(5)
    assert product.last_restocked is not None


def test_expiry_helpers():
    today = date(2026, 1, 1)
    product = Product(expiry_date=today + timedelta(days=20), quantity=4, reorder_point=5)
    assert product.days_until_expiry(today) == 20
    assert product.is_expiring_soon(days=30, today=today)
    assert not product.is_expiring_soon(days=10, today=today)
    assert product.needs_reorder()


def _product(category, price, quantity, expiry, visible=True):
    return Product(category=category, price=price, quantity=quantity, expiry_date=expiry, is_visible=visible)


def test_product_analytics_groups_by_category():
    today = date(2026, 6, 1)
    products = [
        _product("Medicines", 10.0, 5, today + timedelta(days=100)),
        _product("Medicines", 20.0, 50, today - timedelta(days=1), visible=False),
        _product("First Aid", 2.5, 4, today + timedelta(days=10)),
    ]
    overall, medicines, first_aid = product_analytics(products, low_stock_threshold=10, today=today)

    assert overall["section"] == "Overall Statistics"
    assert overall["total_products"] == 3
    assert overall["total_value"] == 10.0 * 5 + 20.0 * 50 + 2.5 * 4
    assert overall["low_stock_products"] == 2
    assert overall["expired_products"] == 1
    assert overall["visible_products"] == 2

    assert medicines["section"] == "Medicines"
    assert medicines["total_products"] == 2
    assert medicines["expired_products"] == 1
    assert first_aid["total_value"] == 10.0
    assert first_aid["low_stock_products"] == 1


def test_product_analytics_empty():
    assert product_analytics([]) == [{
        "section": "Overall Statistics", "total_products": 0, "total_value": 0.0,
        "low_stock_products": 0, "expired_products": 0, "visible_products": 0,
    }]


def test_category_distribution():
    products = [Product(category="Medicines"), Product(category="First Aid"), Product(category="Medicines")]
    assert category_distribution(products) == [
        {"category": "Medicines", "count": 2},
        {"category": "First Aid", "count": 1},
    ]
