"""Order status transitions and their effect on product stock."""
from flask import current_app

from medcare.extensions import db
from medcare.errors import ValidationError, InvalidTransition, InsufficientStock, NotFound
from medcare.inventory import decrement_stock, restore_stock
from medcare.models.order import Order, OrderItem, ORDER_STATUSES
from medcare.models.product import Product

# Forward path; Cancelled can be entered from any non-terminal state
FULFILMENT_PATH = ["Pending", "Processing", "Shipped", "Delivered"]
TERMINAL_STATUSES = ("Delivered", "Cancelled")
DELETABLE_STATUSES = ("Pending", "Cancelled")


def check_transition(current, target):
    if target not in ORDER_STATUSES:
        raise ValidationError("Invalid status")
    if target == current:
        return
    if current in TERMINAL_STATUSES:
        raise InvalidTransition(current, target)
    if target == "Cancelled":
        return
    if FULFILMENT_PATH.index(target) < FULFILMENT_PATH.index(current):
        raise InvalidTransition(current, target)


def change_status(order, target):
    """Move ``order`` to ``target`` and apply the stock side effects.

    Runs inside the caller's transaction: on InsufficientStock the caller rolls
    back, so a rejected Delivered transition leaves every product untouched.
    """
    current = order.status
    check_transition(current, target)
    if target == current:
        return order

    if target == "Cancelled":
        for item in order.items:
            restore_stock(item.product_id, item.quantity)
    elif target == "Delivered":
        for item in order.items:
            product = db.session.get(Product, item.product_id)
            if product is None:
                continue
            decrement_stock(product, item.quantity)

    order.status = target
    current_app.logger.info(f"Order #{order.id} status changed from {current} to {target}")
    return order


def ensure_deletable(order):
    if order.status not in DELETABLE_STATUSES:
        raise ValidationError("Can only delete pending or cancelled orders")


def build_order(user, requested_items, **order_fields):
    """Create a Pending order from ``[{"product": id, "quantity": n, "prescription": bool}]``.

    Stock is taken for every line and unit prices are snapshotted. Any failure
    raises before commit; the caller rolls back so no partial order survives.
    """
    if not requested_items:
        raise ValidationError("Order must contain at least one item")

    order = Order(user_id=user.id, status="Pending", **order_fields)
    total = 0.0
    for entry in requested_items:
        product_id = entry.get("product") or entry.get("product_id")
        quantity = entry.get("quantity", 1)
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError("Quantity must be a positive integer.")

        try:
            product = db.session.get(Product, int(product_id))
        except (TypeError, ValueError):
            product = None
        if product is None:
            raise NotFound(f"Product not found: {product_id}")
        if product.out_of_stock:
            raise ValidationError(f"{product.name} is out of stock")
        if product.quantity < quantity:
            raise InsufficientStock(product.name)
        if product.prescription_required and not entry.get("prescription"):
            raise ValidationError(f"Prescription required for {product.name}")

        decrement_stock(product, quantity)
        order.items.append(OrderItem(product_id=product.id, quantity=quantity, price=product.price))
        total += product.price * quantity

    order.total_amount = round(total, 2)
    db.session.add(order)
    return order
