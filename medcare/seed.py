from datetime import date, timedelta

import click

from medcare.extensions import db
from medcare.models import User, Supplier, SupplierProduct, Product, markup_price


def seed_database(admin_email="admin@medcare.io", admin_password="admin123"):
    db.create_all()
    click.echo("Checking if database needs seeding...")

    # Check if data already exists
    if User.query.filter_by(email=admin_email).first() is not None:
        click.echo("Database already contains data. Skipping seeding.")
        return

    click.echo("Seeding database with initial data...")

    admin = User(first_name="System", last_name="Admin", email=admin_email, role="admin")
    admin.set_password(admin_password)

    supplier_user = User(first_name="Nimal", last_name="Perera", email="supplier@medcare.io", role="supplier",
                         company_name="Lanka Pharma Distributors", business_type="Wholesale", tax_id="TX-1001")
    supplier_user.set_password("supplier123")
    supplier = Supplier(user=supplier_user)

    catalog = [
        ("Paracetamol 500mg", "Medicines", "Panadol", 120.0),
        ("Digital Thermometer", "Medical Devices", "Omron", 1500.0),
        ("Elastic Bandage", "First Aid", "Hansaplast", 250.0),
    ]
    for name, category, brand, buying_price in catalog:
        supplier.products.append(SupplierProduct(
            name=name, category=category, brand=brand,
            buying_price=buying_price, selling_price=markup_price(buying_price),
        ))

    db.session.add_all([admin, supplier_user, supplier])
    db.session.flush()  # Flush to get IDs for relationships

    next_year = date.today() + timedelta(days=365)
    products = [
        Product(name="Vitamin C 1000mg", description="Immune support tablets, 30 count",
                price=850.0, buying_price=700.0, category="Health Supplements", brand="Nature's Way",
                expiry_date=next_year, is_visible=True, supplier_id=supplier.id),
        Product(name="Amoxicillin 250mg", description="Antibiotic capsules, strip of 10",
                price=430.0, buying_price=360.0, category="Medicines", brand="Amoxil",
                expiry_date=next_year, is_visible=True, prescription_required=True, supplier_id=supplier.id),
        Product(name="Blood Pressure Monitor", description="Automatic upper arm monitor",
                price=9800.0, buying_price=8200.0, category="Medical Equipment", brand="Omron",
                expiry_date=date.today() + timedelta(days=3 * 365), is_visible=True),
    ]
    for product, quantity in zip(products, [120, 40, 4]):
        product.set_quantity(quantity)
    db.session.add_all(products)

    try:
        db.session.commit()
        click.echo("Database seeded successfully!")
    except Exception as e:
        db.session.rollback()
        click.echo(f"Error seeding database: {e}", err=True)
        raise
