from decimal import Decimal, ROUND_HALF_UP
from datetime import datetime
from medcare.extensions import db

MARKUP_RATE = Decimal("1.15")


def markup_price(buying_price):
    """Selling price for a buying price with the fixed 15% markup, rounded to cents."""
    price = Decimal(str(buying_price)) * MARKUP_RATE
    return float(price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class Supplier(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    # Identity (email, password, business details) lives on the linked User with the "supplier" role
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), unique=True, nullable=False)
    date_added = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship("User", backref=db.backref("supplier_profile", uselist=False, lazy=True))
    products = db.relationship("SupplierProduct", backref="supplier", lazy=True,
                               cascade="all, delete-orphan", order_by="SupplierProduct.id")
    inventory_products = db.relationship("Product", backref="supplier", lazy=True)

    def __repr__(self):
        return f'Supplier(company="{self.user.company_name if self.user else "N/A"}", products={len(self.products)})'

    def to_dict(self, include_products=True):
        user = self.user
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "phone": user.phone,
            "address": user.address,
            "company_name": user.company_name,
            "business_type": user.business_type,
            "tax_id": user.tax_id,
            "role": user.role,
            "created_at": self.date_added.isoformat() if self.date_added else None,
        }
        if include_products:
            data["products"] = [p.to_dict() for p in self.products]
        return data

    def brief(self):
        user = self.user
        return {
            "id": self.id,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "company_name": user.company_name,
        }


class SupplierProduct(db.Model):
    """An item in a supplier's catalog, not yet part of the sellable inventory."""
    __tablename__ = "supplier_product"

    id = db.Column(db.Integer, primary_key=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("supplier.id"), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    category = db.Column(db.String(50), nullable=False)
    brand = db.Column(db.String(50), nullable=False)
    buying_price = db.Column(db.Float, nullable=False)
    selling_price = db.Column(db.Float, nullable=False)
    # Set once the item has been transferred to the inventory
    transferred_product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=True)

    def __repr__(self):
        return f"SupplierProduct({self.name}, buy={self.buying_price}, sell={self.selling_price})"

    def to_dict(self):
        return {
            "id": self.id,
            "supplier_id": self.supplier_id,
            "name": self.name,
            "category": self.category,
            "brand": self.brand,
            "buying_price": self.buying_price,
            "selling_price": f"{self.selling_price:.2f}",
            "transferred_product_id": self.transferred_product_id,
            "is_supplier_product": True,
        }
