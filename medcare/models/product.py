from datetime import datetime, date
from medcare.extensions import db

CATEGORIES = ["Medicines", "Medical Devices", "First Aid", "Health Supplements", "Medical Equipment"]
SUPPLIER_STATUSES = ["active", "discontinued", "on-hold"]


class Product(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)
    price = db.Column(db.Float, nullable=False)
    buying_price = db.Column(db.Float, nullable=False)
    image = db.Column(db.String(255), nullable=False, default="")
    category = db.Column(db.String(50), nullable=False, index=True)
    brand = db.Column(db.String(50), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    expiry_date = db.Column(db.Date, nullable=False, index=True)
    is_new = db.Column(db.Boolean, nullable=False, default=True)
    out_of_stock = db.Column(db.Boolean, nullable=False, default=False)  # Always quantity <= 0
    is_visible = db.Column(db.Boolean, nullable=False, default=False, index=True)
    prescription_required = db.Column(db.Boolean, nullable=False, default=False)
    minimum_quantity = db.Column(db.Integer, nullable=False, default=10)
    reorder_point = db.Column(db.Integer, nullable=False, default=5)
    last_restocked = db.Column(db.DateTime, nullable=True, default=datetime.utcnow)
    supplier_id = db.Column(db.Integer, db.ForeignKey("supplier.id"), nullable=True, index=True)

    supplier_product_code = db.Column(db.String(50), nullable=True)
    supplier_price = db.Column(db.Float, nullable=True)
    supplier_discount = db.Column(db.Float, nullable=False, default=0)
    supplier_status = db.Column(db.String(20), nullable=False, default="active")

    date_added = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    date_updated = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"Product('{self.name}', qty={self.quantity})"

    def set_quantity(self, quantity):
        """Set stock and keep out_of_stock in sync."""
        if quantity > (self.quantity or 0):
            self.last_restocked = datetime.utcnow()
        self.quantity = quantity
        self.out_of_stock = quantity <= 0

    def needs_reorder(self):
        return self.quantity <= self.reorder_point

    def days_until_expiry(self, today=None):
        today = today or date.today()
        return (self.expiry_date - today).days

    def is_expiring_soon(self, days=30, today=None):
        return self.days_until_expiry(today) <= days

    def to_dict(self, include_supplier=True):
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "buying_price": self.buying_price,
            "image": self.image,
            "category": self.category,
            "brand": self.brand,
            "quantity": self.quantity,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "is_new": self.is_new,
            "out_of_stock": self.out_of_stock,
            "is_visible": self.is_visible,
            "prescription_required": self.prescription_required,
            "minimum_quantity": self.minimum_quantity,
            "reorder_point": self.reorder_point,
            "last_restocked": self.last_restocked.isoformat() if self.last_restocked else None,
            "supplier_id": self.supplier_id,
            "supplier_product_code": self.supplier_product_code,
            "supplier_price": self.supplier_price,
            "supplier_discount": self.supplier_discount,
            "supplier_status": self.supplier_status,
            "created_at": self.date_added.isoformat() if self.date_added else None,
            "is_supplier_product": False,
        }
        if include_supplier:
            data["supplier"] = self.supplier.brief() if self.supplier else None
        return data
