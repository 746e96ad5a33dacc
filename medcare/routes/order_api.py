from flask import Blueprint, current_app
from flask_login import login_required, current_user

from medcare.extensions import db
from medcare.errors import ValidationError
from medcare.forms import ContactInfoForm, CreateOrderForm, UpdateOrderStatusForm, UpdateOrderForm
from medcare.models import Order, OrderItem, Product
from medcare.order_status import build_order, change_status, ensure_deletable
from medcare.policies import authorizer, requires
from medcare.routes.utils import success, json_body, validated

order_bp = Blueprint("order_api", __name__, url_prefix="/api/orders")


def _get_order(order_id, action):
    order = db.get_or_404(Order, order_id, description="Order not found")
    authorizer.ensure(current_user._get_current_object(), action, order)
    return order


@order_bp.route("/", methods=["POST"])
@login_required
def create_order():
    """Place an order; stock is taken for every item or for none."""
    data = json_body()
    contact = data.get("contact_info")
    if not isinstance(contact, dict):
        raise ValidationError("Contact information is required")
    contact_form = validated(ContactInfoForm, contact)
    form = validated(CreateOrderForm, data)
    items = data.get("items")
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise ValidationError("Items must be provided as an array")

    try:
        order = build_order(
            current_user,
            items,
            shipping_address=form.shipping_address.data,
            contact_name=contact_form.name.data,
            contact_email=contact_form.email.data,
            contact_phone=contact_form.phone.data,
            delivery_notes=form.delivery_notes.data or "",
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info(f"Order #{order.id} placed by {current_user.email} for {order.total_amount}")
    return success(201, message="Order created successfully", order=order.to_dict())


@order_bp.route("/", methods=["GET"])
@requires("order:view_all")
def get_orders():
    orders = Order.query.order_by(Order.order_date.desc()).all()
    return success(count=len(orders), orders=[o.to_dict() for o in orders])


@order_bp.route("/my", methods=["GET"])
@login_required
def get_my_orders():
    orders = Order.query.filter_by(user_id=current_user.id).order_by(Order.order_date.desc()).all()
    return success(count=len(orders), orders=[o.to_dict() for o in orders])


@order_bp.route("/supplier", methods=["GET"])
@requires("order:view_supplier")
def get_supplier_orders():
    """Orders containing the supplier's products, reduced to those line items."""
    profile = current_user.supplier_profile
    if profile is None:
        return success(count=0, orders=[])
    orders = (
        Order.query.join(OrderItem).join(Product)
        .filter(Product.supplier_id == profile.id)
        .order_by(Order.order_date.desc())
        .distinct()
        .all()
    )
    result = []
    for order in orders:
        own_items = [item for item in order.items if item.product and item.product.supplier_id == profile.id]
        data = order.to_dict(items=own_items)
        data.pop("payment_details", None)
        result.append(data)
    return success(count=len(result), orders=result)


@order_bp.route("/<int:order_id>", methods=["GET"])
@login_required
def get_order(order_id):
    order = _get_order(order_id, "order:view")
    return success(order=order.to_dict())


@order_bp.route("/<int:order_id>/status", methods=["PUT"])
@requires("order:update")
def update_order_status(order_id):
    order = db.get_or_404(Order, order_id, description="Order not found")
    form = validated(UpdateOrderStatusForm)
    try:
        change_status(order, form.status.data)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return success(message="Order status updated successfully", order=order.to_dict())


@order_bp.route("/<int:order_id>", methods=["PUT"])
@requires("order:update")
def update_order(order_id):
    """Change the status and/or the delivery notes of an order."""
    order = db.get_or_404(Order, order_id, description="Order not found")
    data = json_body()
    form = validated(UpdateOrderForm, data)
    try:
        if data.get("status"):
            change_status(order, form.status.data)
        if "delivery_notes" in data:
            order.delivery_notes = form.delivery_notes.data or ""
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return success(message="Order updated successfully", order=order.to_dict())


@order_bp.route("/<int:order_id>", methods=["DELETE"])
@login_required
def delete_order(order_id):
    order = _get_order(order_id, "order:delete")
    ensure_deletable(order)
    for payment in order.payments:
        db.session.delete(payment)
    db.session.delete(order)
    db.session.commit()
    current_app.logger.info(f"Order #{order_id} deleted by {current_user.email}")
    return success(message="Order deleted successfully")
