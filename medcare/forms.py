from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict
from wtforms import StringField, EmailField, FloatField, IntegerField, PasswordField, BooleanField, DateField
from wtforms.validators import DataRequired, Email, Length, Optional, NumberRange, AnyOf

from medcare.models import ROLES, CATEGORIES, SUPPLIER_STATUSES, ORDER_STATUSES, PAYMENT_METHODS, PAYMENT_STATUSES


class JsonForm(FlaskForm):
    """Form fed from the JSON body; the API is token authenticated so CSRF is off."""

    class Meta:
        csrf = False

    def __init__(self, payload=None, **kwargs):
        if payload is None:
            payload = request.get_json(silent=True) or {}
        # Nested objects and nulls are handled by the routes, not by fields.
        # Booleans stay as they are so BooleanField can read False.
        flat = {}
        for key, value in payload.items():
            if value is None or isinstance(value, (dict, list)):
                continue
            flat[key] = value if isinstance(value, bool) else str(value)
        super().__init__(formdata=ImmutableMultiDict(flat), **kwargs)

    def first_error(self):
        for field_name, messages in self.errors.items():
            if messages:
                return f"{field_name}: {messages[0]}"
        return "Invalid request data"


class RegistrationForm(JsonForm):
    first_name = StringField("First Name", validators=[DataRequired(), Length(max=50)])
    last_name = StringField("Last Name", validators=[DataRequired(), Length(max=50)])
    email = EmailField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=6)])
    phone = StringField("Phone", validators=[Optional(), Length(max=20)])
    address = StringField("Address", validators=[Optional(), Length(max=200)])
    role = StringField("Role", validators=[Optional(), AnyOf(ROLES)])
    company_name = StringField("Company Name", validators=[Optional(), Length(max=100)])
    business_type = StringField("Business Type", validators=[Optional(), Length(max=50)])
    tax_id = StringField("Tax ID", validators=[Optional(), Length(max=50)])


class SupplierRegistrationForm(RegistrationForm):
    company_name = StringField("Company Name", validators=[DataRequired(), Length(max=100)])


class LoginForm(JsonForm):
    email = EmailField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])


class UpdateUserForm(JsonForm):
    """Partial update: every field optional, only the ones sent are applied."""
    first_name = StringField("First Name", validators=[Optional(), Length(max=50)])
    last_name = StringField("Last Name", validators=[Optional(), Length(max=50)])
    email = EmailField("Email", validators=[Optional(), Email(), Length(max=120)])
    password = PasswordField("Password", validators=[Optional(), Length(min=6)])
    phone = StringField("Phone", validators=[Optional(), Length(max=20)])
    address = StringField("Address", validators=[Optional(), Length(max=200)])
    role = StringField("Role", validators=[Optional(), AnyOf(ROLES)])
    is_active = BooleanField("Active")
    company_name = StringField("Company Name", validators=[Optional(), Length(max=100)])
    business_type = StringField("Business Type", validators=[Optional(), Length(max=50)])
    tax_id = StringField("Tax ID", validators=[Optional(), Length(max=50)])


class SupplierProductForm(JsonForm):
    name = StringField("Product Name", validators=[DataRequired(), Length(max=100)])
    category = StringField("Category", validators=[DataRequired(), AnyOf(CATEGORIES)])
    brand = StringField("Brand", validators=[DataRequired(), Length(max=50)])
    buying_price = FloatField("Buying Price", validators=[NumberRange(min=0)])
    selling_price = FloatField("Selling Price", validators=[Optional(), NumberRange(min=0)])


class ProductForm(JsonForm):
    name = StringField("Product Name", validators=[DataRequired(), Length(min=3, max=100)])
    description = StringField("Description", validators=[DataRequired(), Length(min=10, max=500)])
    price = FloatField("Price", validators=[NumberRange(min=0, max=1000000)])
    buying_price = FloatField("Buying Price", validators=[NumberRange(min=0, max=1000000)])
    image = StringField("Image", validators=[Optional(), Length(max=255)])
    category = StringField("Category", validators=[DataRequired(), AnyOf(CATEGORIES)])
    brand = StringField("Brand", validators=[DataRequired(), Length(min=2, max=50)])
    quantity = IntegerField("Quantity", validators=[NumberRange(min=0)])
    expiry_date = DateField("Expiry Date", validators=[DataRequired()])
    prescription_required = BooleanField("Prescription Required")
    minimum_quantity = IntegerField("Minimum Quantity", validators=[Optional(), NumberRange(min=0)])
    reorder_point = IntegerField("Reorder Point", validators=[Optional(), NumberRange(min=0)])
    supplier_id = IntegerField("Supplier", validators=[Optional()])
    supplier_product_code = StringField("Supplier Product Code", validators=[Optional(), Length(max=50)])
    supplier_price = FloatField("Supplier Price", validators=[Optional(), NumberRange(min=0)])
    supplier_discount = FloatField("Supplier Discount", validators=[Optional(), NumberRange(min=0, max=100)])
    supplier_status = StringField("Supplier Status", validators=[Optional(), AnyOf(SUPPLIER_STATUSES)])


class UpdateProductForm(JsonForm):
    name = StringField("Product Name", validators=[Optional(), Length(min=3, max=100)])
    description = StringField("Description", validators=[Optional(), Length(min=10, max=500)])
    price = FloatField("Price", validators=[Optional(), NumberRange(min=0, max=1000000)])
    buying_price = FloatField("Buying Price", validators=[Optional(), NumberRange(min=0, max=1000000)])
    image = StringField("Image", validators=[Optional(), Length(max=255)])
    category = StringField("Category", validators=[Optional(), AnyOf(CATEGORIES)])
    brand = StringField("Brand", validators=[Optional(), Length(min=2, max=50)])
    quantity = IntegerField("Quantity", validators=[Optional(), NumberRange(min=0)])
    expiry_date = DateField("Expiry Date", validators=[Optional()])
    prescription_required = BooleanField("Prescription Required")
    minimum_quantity = IntegerField("Minimum Quantity", validators=[Optional(), NumberRange(min=0)])
    reorder_point = IntegerField("Reorder Point", validators=[Optional(), NumberRange(min=0)])
    supplier_status = StringField("Supplier Status", validators=[Optional(), AnyOf(SUPPLIER_STATUSES)])


class QuantityForm(JsonForm):
    quantity = IntegerField("Quantity", validators=[NumberRange(min=0, message="Quantity cannot be negative")])


class TransferForm(JsonForm):
    """Inventory fields a supplier catalog entry does not carry."""
    description = StringField("Description", validators=[DataRequired(), Length(min=10, max=500)])
    quantity = IntegerField("Quantity", validators=[NumberRange(min=0)])
    expiry_date = DateField("Expiry Date", validators=[DataRequired()])
    image = StringField("Image", validators=[Optional(), Length(max=255)])
    prescription_required = BooleanField("Prescription Required")


class ContactInfoForm(JsonForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=100)])
    email = EmailField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    phone = StringField("Phone", validators=[DataRequired(), Length(max=20)])


class CreateOrderForm(JsonForm):
    shipping_address = StringField("Shipping Address", validators=[DataRequired(), Length(max=200)])
    delivery_notes = StringField("Delivery Notes", validators=[Optional(), Length(max=1000)])


class UpdateOrderStatusForm(JsonForm):
    status = StringField("Order Status", validators=[DataRequired(), AnyOf(ORDER_STATUSES, message="Invalid status")])


class UpdateOrderForm(JsonForm):
    status = StringField("Order Status", validators=[Optional(), AnyOf(ORDER_STATUSES, message="Invalid status")])
    delivery_notes = StringField("Delivery Notes", validators=[Optional(), Length(max=1000)])


class PaymentForm(JsonForm):
    order = IntegerField("Order", validators=[DataRequired()])
    amount = FloatField("Amount", validators=[Optional(), NumberRange(min=0)])
    currency = StringField("Currency", validators=[Optional(), Length(max=10)])
    payment_method = StringField("Payment Method", validators=[DataRequired(), AnyOf(PAYMENT_METHODS)])


class CardDetailsForm(JsonForm):
    card_number = StringField("Card Number", validators=[DataRequired(), Length(min=12, max=19)])
    card_holder_name = StringField("Card Holder Name", validators=[DataRequired(), Length(max=100)])
    expiry_date = StringField("Expiry Date", validators=[DataRequired(), Length(max=7)])


class PaymentStatusForm(JsonForm):
    status = StringField("Payment Status", validators=[DataRequired(), AnyOf(PAYMENT_STATUSES, message="Invalid status")])
