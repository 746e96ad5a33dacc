import secrets
import string
from flask import Blueprint, current_app
from flask_login import login_required, current_user

from medcare.extensions import db
from medcare.errors import ValidationError, NotFound
from medcare.forms import PaymentForm, CardDetailsForm, PaymentStatusForm
from medcare.models import Order, Payment
from medcare.policies import authorizer, requires
from medcare.routes.utils import success, json_body, validated

payment_bp = Blueprint("payment_api", __name__, url_prefix="/api/payments")

METHOD_LABELS = {"card": "Card", "cod": "Cash on Delivery"}


def generate_payment_id():
    alphabet = string.ascii_lowercase + string.digits
    return "pi_" + "".join(secrets.choice(alphabet) for _ in range(9))


@payment_bp.route("/create-intent", methods=["POST"])
@login_required
def create_payment_intent():
    """Record a payment for an order (simulated gateway: card payments succeed, COD stays pending)."""
    data = json_body()
    form = validated(PaymentForm, data)
    order = db.session.get(Order, form.order.data)
    if order is None:
        raise NotFound("Order not found")
    authorizer.ensure(current_user._get_current_object(), "payment:create", order)
    if order.status == "Cancelled":
        raise ValidationError("Cannot pay for a cancelled order")
    if order.payment_status == "completed":
        raise ValidationError("Order has already been paid")

    payment = Payment(
        order_id=order.id,
        user_id=current_user.id,
        amount=form.amount.data if form.amount.data is not None else order.total_amount,
        currency=(form.currency.data or "lkr").lower(),
        payment_method=form.payment_method.data,
        payment_id=generate_payment_id(),
    )
    if payment.payment_method == "card":
        card = data.get("card_details")
        if not isinstance(card, dict):
            raise ValidationError("Card details are required for card payments")
        card_form = validated(CardDetailsForm, card)
        card_number = card_form.card_number.data.replace(" ", "")
        if not card_number.isdigit():
            raise ValidationError("card_number: Card number must contain only digits")
        payment.card_last4 = card_number[-4:]
        payment.card_holder_name = card_form.card_holder_name.data
        payment.card_expiry = card_form.expiry_date.data
        payment.status = "completed"
    else:
        payment.status = "pending"

    try:
        db.session.add(payment)
        db.session.flush()
        order.payment_reference = payment.id
        order.payment_status = payment.status
        order.payment_method = METHOD_LABELS[payment.payment_method]
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info(f"Payment {payment.payment_id} ({payment.status}) recorded for order #{order.id}")
    message = "Payment processed successfully" if payment.status == "completed" else "Payment recorded"
    return success(201, message=message, payment_id=payment.id, payment=payment.to_dict())


@payment_bp.route("/", methods=["GET"])
@requires("payment:view_all")
def get_payments():
    payments = Payment.query.order_by(Payment.date_created.desc()).all()
    return success(count=len(payments), payments=[p.to_dict(include_order=True) for p in payments])


@payment_bp.route("/<int:payment_id>", methods=["GET"])
@login_required
def get_payment(payment_id):
    payment = db.get_or_404(Payment, payment_id, description="Payment not found")
    authorizer.ensure(current_user._get_current_object(), "payment:view", payment)
    return success(payment=payment.to_dict(include_order=True))


@payment_bp.route("/<int:payment_id>/status", methods=["PUT"])
@requires("payment:update")
def update_payment_status(payment_id):
    payment = db.get_or_404(Payment, payment_id, description="Payment not found")
    form = validated(PaymentStatusForm)
    payment.status = form.status.data
    order = payment.order
    if order is not None and order.payment_reference == payment.id:
        order.payment_status = payment.status
    db.session.commit()
    current_app.logger.info(f"Payment {payment.payment_id} marked {payment.status} by {current_user.email}")
    return success(message="Payment status updated", payment=payment.to_dict())
