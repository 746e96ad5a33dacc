from flask_login import UserMixin
from datetime import datetime
from medcare.extensions import db, bcrypt

ROLES = ["customer", "admin", "supplier"]


class User(db.Model, UserMixin):
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(128), nullable=False)
    phone = db.Column(db.String(20), nullable=False, default="")
    address = db.Column(db.String(200), nullable=False, default="")
    role = db.Column(db.String(20), nullable=False, default="customer")  # Roles: "customer", "admin", "supplier"
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    # Business fields, used by supplier accounts
    company_name = db.Column(db.String(100), nullable=False, default="")
    business_type = db.Column(db.String(50), nullable=False, default="")
    tax_id = db.Column(db.String(50), nullable=False, default="")
    date_created = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    date_updated = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    orders = db.relationship("Order", backref="placer", lazy=True)

    def __repr__(self):
        return f"User('{self.email}', '{self.role}', Active: {self.is_active})"

    def set_password(self, raw_password):
        self.password_hash = bcrypt.generate_password_hash(raw_password).decode("utf-8")

    def check_password(self, raw_password):
        return bcrypt.check_password_hash(self.password_hash, raw_password)

    @property
    def is_admin(self):
        return self.role == "admin"

    @property
    def is_supplier(self):
        return self.role == "supplier"

    @property
    def is_customer(self):
        return self.role == "customer"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self):
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "role": self.role,
            "is_admin": self.is_admin,
            "is_active": self.is_active,
            "company_name": self.company_name,
            "business_type": self.business_type,
            "tax_id": self.tax_id,
            "created_at": self.date_created.isoformat() if self.date_created else None,
        }
