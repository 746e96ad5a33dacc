from datetime import datetime
from medcare.extensions import db

PAYMENT_METHODS = ["cod", "card"]
PAYMENT_STATUSES = ["pending", "completed", "failed", "refunded"]


class Payment(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("order.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(10), nullable=False, default="lkr")
    payment_method = db.Column(db.String(10), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="pending")
    card_last4 = db.Column(db.String(4), nullable=True)
    card_holder_name = db.Column(db.String(100), nullable=True)
    card_expiry = db.Column(db.String(7), nullable=True)
    payment_id = db.Column(db.String(40), unique=True, nullable=False)
    receipt_url = db.Column(db.String(255), nullable=True)
    error_message = db.Column(db.String(255), nullable=True)
    error_code = db.Column(db.String(50), nullable=True)
    date_created = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    date_updated = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = db.relationship("Order", backref=db.backref("payments", lazy=True))
    user = db.relationship("User", backref=db.backref("payments", lazy=True))

    def __repr__(self):
        return f"<Payment {self.payment_id} {self.status}>"

    def to_dict(self, include_order=False):
        data = {
            "id": self.id,
            "order_id": self.order_id,
            "user": {
                "id": self.user.id,
                "first_name": self.user.first_name,
                "last_name": self.user.last_name,
                "email": self.user.email,
            } if self.user else None,
            "amount": self.amount,
            "currency": self.currency,
            "payment_method": self.payment_method,
            "status": self.status,
            "card_details": {
                "last4": self.card_last4,
                "card_holder_name": self.card_holder_name,
                "expiry_date": self.card_expiry,
            } if self.card_last4 else None,
            "payment_id": self.payment_id,
            "receipt_url": self.receipt_url,
            "error": {"message": self.error_message, "code": self.error_code} if self.error_message else None,
            "created_at": self.date_created.isoformat() if self.date_created else None,
        }
        if include_order and self.order:
            data["order"] = self.order.to_dict()
        return data
