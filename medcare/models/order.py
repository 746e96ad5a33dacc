from datetime import datetime
from medcare.extensions import db

ORDER_STATUSES = ["Pending", "Processing", "Shipped", "Delivered", "Cancelled"]


class Order(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    order_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    status = db.Column(db.String(20), nullable=False, default="Pending")  # One of ORDER_STATUSES
    total_amount = db.Column(db.Float, nullable=False, default=0.0)
    shipping_address = db.Column(db.String(200), nullable=False, default="")
    contact_name = db.Column(db.String(100), nullable=False)
    contact_email = db.Column(db.String(120), nullable=False)
    contact_phone = db.Column(db.String(20), nullable=False)
    payment_method = db.Column(db.String(30), nullable=False, default="Cash on Delivery")
    payment_status = db.Column(db.String(20), nullable=True)
    payment_reference = db.Column(db.Integer, nullable=True)  # Payment.id of the latest payment
    delivery_notes = db.Column(db.Text, nullable=False, default="")
    date_updated = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = db.relationship("OrderItem", backref="order", lazy=True, cascade="all, delete-orphan",
                            order_by="OrderItem.id")

    def __repr__(self):
        return f"Order({self.id}, {self.status}, {self.total_amount})"

    def to_dict(self, items=None):
        items = self.items if items is None else items
        return {
            "id": self.id,
            "user_id": self.user_id,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "status": self.status,
            "total_amount": self.total_amount,
            "shipping_address": self.shipping_address,
            "contact_info": {
                "name": self.contact_name,
                "email": self.contact_email,
                "phone": self.contact_phone,
            },
            "payment_method": self.payment_method,
            "payment_details": {
                "payment_id": self.payment_reference,
                "status": self.payment_status,
            } if self.payment_reference else None,
            "delivery_notes": self.delivery_notes,
            "items": [item.to_dict() for item in items],
        }


class OrderItem(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("order.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Float, nullable=False)  # Unit price at the time of purchase

    product = db.relationship("Product", backref="order_items", lazy=True)

    def __repr__(self):
        return f"OrderItem(Order ID: {self.order_id}, Product ID: {self.product_id}, Qty: {self.quantity})"

    def to_dict(self):
        product = self.product
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product": {
                "id": product.id,
                "name": product.name,
                "price": product.price,
                "image": product.image,
                "brand": product.brand,
                "category": product.category,
                "supplier_id": product.supplier_id,
            } if product else None,
            "quantity": self.quantity,
            "price": self.price,
        }
