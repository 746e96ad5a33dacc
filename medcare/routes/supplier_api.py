from datetime import date
from flask import Blueprint, current_app
from flask_login import current_user

from medcare.extensions import db
from medcare.errors import ValidationError, NotFound
from medcare.forms import SupplierRegistrationForm, UpdateUserForm, SupplierProductForm, TransferForm
from medcare.models import Supplier, SupplierProduct, Product, CATEGORIES, markup_price
from medcare.policies import requires
from medcare.routes.auth_api import create_user, apply_user_update, commit_user_change, delete_user_account
from medcare.routes.utils import success, json_body, validated

supplier_bp = Blueprint("supplier_api", __name__, url_prefix="/api/suppliers")


def build_supplier_products(entries):
    """Validate catalog entries and fill in selling prices with the standard markup."""
    if not isinstance(entries, list):
        raise ValidationError("Products must be provided as an array")
    built = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValidationError("Each product must be an object")
        form = validated(SupplierProductForm, entry)
        buying_price = form.buying_price.data
        selling_price = form.selling_price.data
        if selling_price is None:
            selling_price = markup_price(buying_price)
        elif selling_price <= buying_price:
            raise ValidationError(f"Selling price for {form.name.data} must be greater than the buying price")
        built.append((entry.get("id"), {
            "name": form.name.data,
            "category": form.category.data,
            "brand": form.brand.data,
            "buying_price": buying_price,
            "selling_price": selling_price,
        }))
    return built


def replace_supplier_products(supplier, entries):
    existing = {p.id: p for p in supplier.products}
    updated = []
    for item_id, fields in build_supplier_products(entries):
        current = existing.get(item_id)
        if current is not None:
            # Keep the row (and its transfer marker), refresh the catalog fields
            for key, value in fields.items():
                setattr(current, key, value)
            updated.append(current)
        else:
            updated.append(SupplierProduct(**fields))
    supplier.products = updated


@supplier_bp.route("/register", methods=["POST"])
def register_supplier():
    """Register a supplier account with its (optional) initial catalog."""
    data = json_body()
    form = validated(SupplierRegistrationForm, data)
    user = create_user(form, role="supplier")
    if data.get("products"):
        replace_supplier_products(user.supplier_profile, data["products"])
    commit_user_change("supplier registration")
    current_app.logger.info(f"Registered supplier {user.email} ({user.company_name})")
    return success(201, message="Supplier registered successfully", supplier=user.supplier_profile.to_dict())


@supplier_bp.route("/", methods=["GET"])
@requires("supplier:manage")
def get_suppliers():
    """Get a list of all suppliers."""
    suppliers = Supplier.query.order_by(Supplier.date_added.desc()).all()
    return success(count=len(suppliers), suppliers=[s.to_dict() for s in suppliers])


@supplier_bp.route("/<int:supplier_id>", methods=["GET"])
@requires("supplier:manage")
def get_supplier(supplier_id):
    """Get details for a specific supplier."""
    supplier = db.get_or_404(Supplier, supplier_id, description="Supplier not found")
    return success(supplier=supplier.to_dict())


@supplier_bp.route("/<int:supplier_id>", methods=["PUT"])
@requires("supplier:manage")
def update_supplier(supplier_id):
    """Update supplier details and, when sent, its catalog."""
    supplier = db.get_or_404(Supplier, supplier_id, description="Supplier not found")
    data = json_body()
    form = validated(UpdateUserForm, data)
    apply_user_update(supplier.user, data, form)
    if "products" in data:
        replace_supplier_products(supplier, data["products"])
    commit_user_change("supplier update")
    return success(message="Supplier updated successfully", supplier=supplier.to_dict())


@supplier_bp.route("/<int:supplier_id>/products", methods=["PUT"])
@requires("supplier:manage")
def update_supplier_products(supplier_id):
    """Replace the supplier catalog."""
    supplier = db.get_or_404(Supplier, supplier_id, description="Supplier not found")
    data = json_body()
    replace_supplier_products(supplier, data.get("products"))
    db.session.commit()
    return success(message="Supplier products updated", supplier_id=supplier.id,
                   products=[p.to_dict() for p in supplier.products])


@supplier_bp.route("/<int:supplier_id>/products/<int:item_id>/transfer", methods=["POST"])
@requires("supplier:manage")
def transfer_to_inventory(supplier_id, item_id):
    """Turn a catalog entry into a sellable inventory product."""
    supplier = db.get_or_404(Supplier, supplier_id, description="Supplier not found")
    item = SupplierProduct.query.filter_by(id=item_id, supplier_id=supplier.id).first()
    if item is None:
        raise NotFound("Supplier product not found")
    if item.transferred_product_id is not None:
        raise ValidationError(f"{item.name} has already been transferred to the inventory")
    if item.category not in CATEGORIES:
        raise ValidationError(f"Category must be one of: {', '.join(CATEGORIES)}")

    form = validated(TransferForm)
    if form.expiry_date.data <= date.today():
        raise ValidationError("Expiry date must be in the future")

    try:
        product = Product(
            name=item.name,
            description=form.description.data,
            price=item.selling_price,
            buying_price=item.buying_price,
            image=form.image.data or "",
            category=item.category,
            brand=item.brand,
            expiry_date=form.expiry_date.data,
            prescription_required=form.prescription_required.data,
            supplier_id=supplier.id,
            supplier_price=item.buying_price,
            is_visible=True,
        )
        product.set_quantity(form.quantity.data)
        db.session.add(product)
        db.session.flush()
        item.transferred_product_id = product.id
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info(f"Admin {current_user.email} transferred supplier product {item.id} to inventory as product {product.id}")
    return success(201, message="Product added to inventory", product=product.to_dict())


@supplier_bp.route("/<int:supplier_id>", methods=["DELETE"])
@requires("supplier:manage")
def delete_supplier(supplier_id):
    """Delete a supplier and its account."""
    supplier = db.get_or_404(Supplier, supplier_id, description="Supplier not found")
    if supplier.products:
        raise ValidationError("Cannot delete supplier with existing products. Remove them first.")
    delete_user_account(supplier.user)
    return success(message="Supplier removed")
