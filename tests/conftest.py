from datetime import date, timedelta

import pytest

from medcare import create_app
from medcare.extensions import db
from medcare.models import User, Supplier, Product
from medcare.security import create_access_token


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "BCRYPT_LOG_ROUNDS": 4,
        "PRODUCT_IMAGE_DIR": str(tmp_path / "images"),
        "ENV": "testing",
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(app):
    def _make_user(email, role="customer", password="secret123", **fields):
        with app.app_context():
            user = User(first_name=fields.pop("first_name", "Test"), last_name=fields.pop("last_name", "User"),
                        email=email, role=role, **fields)
            user.set_password(password)
            db.session.add(user)
            if role == "supplier":
                db.session.add(Supplier(user=user))
            db.session.commit()
            return user.id
    return _make_user


@pytest.fixture
def token_for(app):
    def _token_for(user_id):
        with app.app_context():
            return create_access_token(db.session.get(User, user_id))
    return _token_for


@pytest.fixture
def admin_token(make_user, token_for):
    return token_for(make_user("admin@medcare.io", role="admin"))


@pytest.fixture
def customer_id(make_user):
    return make_user("customer@medcare.io")


@pytest.fixture
def customer_token(customer_id, token_for):
    return token_for(customer_id)


@pytest.fixture
def supplier_user_id(make_user):
    return make_user("supplier@medcare.io", role="supplier", company_name="Lanka Pharma")


@pytest.fixture
def supplier_token(supplier_user_id, token_for):
    return token_for(supplier_user_id)


@pytest.fixture
def supplier_id(app, supplier_user_id):
    with app.app_context():
        return db.session.get(User, supplier_user_id).supplier_profile.id


@pytest.fixture
def make_product(app):
    def _make_product(name="Paracetamol 500mg", quantity=10, price=100.0, **fields):
        with app.app_context():
            product = Product(
                name=name,
                description=fields.pop("description", "Pain relief tablets"),
                price=price,
                buying_price=fields.pop("buying_price", price * 0.8),
                category=fields.pop("category", "Medicines"),
                brand=fields.pop("brand", "Panadol"),
                expiry_date=fields.pop("expiry_date", date.today() + timedelta(days=365)),
                is_visible=fields.pop("is_visible", True),
                **fields,
            )
            product.set_quantity(quantity)
            db.session.add(product)
            db.session.commit()
            return product.id
    return _make_product


@pytest.fixture
def stock_of(app):
    """Current (quantity, out_of_stock) of a product, read in a fresh session."""
    def _stock_of(product_id):
        with app.app_context():
            product = db.session.get(Product, product_id)
            return product.quantity, product.out_of_stock
    return _stock_of


@pytest.fixture
def place_order(client):
    def _place_order(token, items):
        return client.post("/api/orders/", headers=auth(token), json={
            "items": items,
            "shipping_address": "12 Galle Road, Colombo",
            "contact_info": {"name": "Kamal Silva", "email": "kamal@medcare.io", "phone": "0771234567"},
        })
    return _place_order
