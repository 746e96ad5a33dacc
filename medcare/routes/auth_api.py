from flask import Blueprint, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError

from medcare.extensions import db
from medcare.errors import ValidationError, Unauthorized, Forbidden
from medcare.forms import RegistrationForm, LoginForm, UpdateUserForm
from medcare.models import User, Supplier
from medcare.policies import requires
from medcare.security import create_access_token
from medcare.routes.utils import success, json_body, validated

auth_bp = Blueprint("auth_api", __name__, url_prefix="/api/auth")

PROFILE_FIELDS = ["first_name", "last_name", "email", "phone", "address", "company_name", "business_type", "tax_id"]


def create_user(form, role=None):
    if User.query.filter_by(email=form.email.data.lower()).first():
        raise ValidationError("Email already exists")
    user = User(
        first_name=form.first_name.data,
        last_name=form.last_name.data,
        email=form.email.data.lower(),
        phone=form.phone.data or "",
        address=form.address.data or "",
        role=role or form.role.data or "customer",
        company_name=form.company_name.data or "",
        business_type=form.business_type.data or "",
        tax_id=form.tax_id.data or "",
    )
    user.set_password(form.password.data)
    db.session.add(user)
    if user.is_supplier:
        db.session.add(Supplier(user=user))
    return user


def apply_user_update(user, data, form, allow_role=False):
    """Copy the fields present in ``data`` onto ``user``."""
    for field in PROFILE_FIELDS:
        if data.get(field):
            value = getattr(form, field).data
            setattr(user, field, value.lower() if field == "email" else value)
    if data.get("password"):
        user.set_password(form.password.data)
    if allow_role:
        if data.get("role"):
            user.role = form.role.data
            if user.is_supplier and user.supplier_profile is None:
                db.session.add(Supplier(user=user))
        if "is_active" in data:
            user.is_active = form.is_active.data


def commit_user_change(action):
    try:
        db.session.commit()
    except IntegrityError as ie:
        db.session.rollback()
        current_app.logger.error(f"Integrity error during {action}: {ie}")
        raise ValidationError("Email already exists")


def delete_user_account(user):
    if user.orders:
        raise ValidationError("Cannot delete a user with existing orders.")
    profile = user.supplier_profile
    if profile is not None:
        if profile.products:
            raise ValidationError("Cannot delete supplier with catalog products. Remove them first.")
        for product in profile.inventory_products:
            product.supplier_id = None
        db.session.delete(profile)
    db.session.delete(user)
    db.session.commit()


# --- Public ---

@auth_bp.route("/register", methods=["POST"])
def register():
    """Register a new customer account."""
    form = validated(RegistrationForm)
    user = create_user(form, role="customer")
    commit_user_change("registration")
    current_app.logger.info(f"Registered user {user.email} as {user.role}")
    return success(201, message="Registration successful", user=user.to_dict(), token=create_access_token(user))


@auth_bp.route("/login", methods=["POST"])
def login():
    form = validated(LoginForm)
    user = User.query.filter_by(email=form.email.data.lower()).first()
    if not user or not user.check_password(form.password.data):
        raise Unauthorized("Invalid email or password")
    if not user.is_active:
        raise Forbidden("Your account is not active. Please contact an administrator.")
    return success(message="Login Successful!", user=user.to_dict(), token=create_access_token(user))


# --- Current user ---

@auth_bp.route("/me", methods=["GET"])
@login_required
def get_me():
    return success(user=current_user.to_dict())


@auth_bp.route("/update", methods=["PUT"])
@login_required
def update_me():
    data = json_body()
    form = validated(UpdateUserForm, data)
    user = current_user._get_current_object()
    apply_user_update(user, data, form)
    commit_user_change("profile update")
    return success(message="Profile updated", user=user.to_dict(), token=create_access_token(user))


@auth_bp.route("/delete", methods=["DELETE"])
@login_required
def delete_me():
    user = current_user._get_current_object()
    delete_user_account(user)
    return success(message="User removed")


# --- User management (admin) ---

@auth_bp.route("/users", methods=["GET"])
@requires("user:manage")
def get_users():
    users = User.query.order_by(User.date_created.desc()).all()
    return success(count=len(users), users=[u.to_dict() for u in users])


@auth_bp.route("/users", methods=["POST"])
@requires("user:manage")
def create_user_by_admin():
    form = validated(RegistrationForm)
    user = create_user(form)
    commit_user_change("user creation")
    current_app.logger.info(f"Admin {current_user.email} created user {user.email}")
    return success(201, message="User created", user=user.to_dict())


@auth_bp.route("/users/<int:user_id>", methods=["GET"])
@requires("user:manage")
def get_user(user_id):
    user = db.get_or_404(User, user_id, description="User not found")
    return success(user=user.to_dict())


@auth_bp.route("/users/<int:user_id>", methods=["PUT"])
@requires("user:manage")
def update_user(user_id):
    user = db.get_or_404(User, user_id, description="User not found")
    data = json_body()
    form = validated(UpdateUserForm, data)
    if user.id == current_user.id and data.get("role") and data["role"] != "admin":
        raise ValidationError("Admins cannot change their own role from Admin.")
    apply_user_update(user, data, form, allow_role=True)
    commit_user_change("user update")
    return success(message="User updated", user=user.to_dict())


@auth_bp.route("/users/<int:user_id>", methods=["DELETE"])
@requires("user:manage")
def delete_user(user_id):
    user = db.get_or_404(User, user_id, description="User not found")
    delete_user_account(user)
    current_app.logger.info(f"Admin {current_user.email} deleted user {user_id}")
    return success(message="User removed")
