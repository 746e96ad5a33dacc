from datetime import date, timedelta
from flask import Blueprint, current_app, request, send_from_directory
from flask_login import current_user, login_required

from medcare.extensions import db
from medcare.errors import ValidationError, NotFound
from medcare.forms import ProductForm, UpdateProductForm, QuantityForm
from medcare.inventory import set_stock
from medcare.models import Product, Supplier, SupplierProduct, CATEGORIES
from medcare.policies import authorizer, requires
from medcare.routes.utils import success, json_body, validated, image_dir, save_product_image

product_bp = Blueprint("product_api", __name__, url_prefix="/api/products")

UPDATABLE_FIELDS = ["name", "description", "price", "buying_price", "image", "category", "brand",
                    "minimum_quantity", "reorder_point", "supplier_status"]


def _product_list(products):
    return success(count=len(products), products=[p.to_dict() for p in products])


def _get_product(product_id):
    return db.get_or_404(Product, product_id, description="Product not found")


def _modifiable_product(product_id):
    product = _get_product(product_id)
    authorizer.ensure(current_user._get_current_object(), "product:modify", product)
    return product


def _check_expiry(expiry_date):
    if expiry_date <= date.today():
        raise ValidationError("Expiry date must be in the future")


# --- Public ---

@product_bp.route("/", methods=["GET"])
def get_products():
    """Products shown in the shop."""
    query = Product.query.filter_by(is_visible=True)
    keyword = request.args.get("keyword", "").strip()
    if keyword:
        query = query.filter(Product.name.ilike(f"%{keyword}%"))
    return _product_list(query.order_by(Product.date_added.desc()).all())


@product_bp.route("/<int:product_id>", methods=["GET"])
def get_product(product_id):
    return success(product=_get_product(product_id).to_dict())


@product_bp.route("/category/<category>", methods=["GET"])
def get_products_by_category(category):
    if category not in CATEGORIES:
        raise ValidationError(f"Category must be one of: {', '.join(CATEGORIES)}")
    products = Product.query.filter_by(category=category, is_visible=True).order_by(Product.name).all()
    return _product_list(products)


@product_bp.route("/images/<path:filename>", methods=["GET"])
def get_product_image(filename):
    return send_from_directory(image_dir(current_app), filename)


# --- Supplier ---

@product_bp.route("/supplier/products", methods=["GET"])
@requires("product:list_own")
def get_own_products():
    """Inventory products owned by the calling supplier."""
    profile = current_user.supplier_profile
    if profile is None:
        return _product_list([])
    products = Product.query.filter_by(supplier_id=profile.id).order_by(Product.date_added.desc()).all()
    return _product_list(products)


@product_bp.route("/supplier/<int:supplier_id>", methods=["GET"])
@requires("supplier:manage")
def get_products_by_supplier(supplier_id):
    """Catalog entries of a supplier followed by its inventory products."""
    supplier = db.get_or_404(Supplier, supplier_id, description="Supplier not found")
    products = Product.query.filter_by(supplier_id=supplier.id).order_by(Product.date_added.desc()).all()
    combined = [item.to_dict() for item in supplier.products] + [p.to_dict() for p in products]
    return success(count=len(combined), products=combined)


# --- Admin ---

@product_bp.route("/admin/all", methods=["GET"])
@requires("product:view_all")
def get_all_products():
    return _product_list(Product.query.order_by(Product.date_added.desc()).all())


@product_bp.route("/admin/low-stock", methods=["GET"])
@requires("product:view_reports")
def get_low_stock_products():
    products = Product.query.filter(Product.quantity <= Product.reorder_point).order_by(Product.quantity).all()
    return _product_list(products)


@product_bp.route("/admin/expiring", methods=["GET"])
@requires("product:view_reports")
def get_expiring_products():
    days = request.args.get("days", current_app.config.get("EXPIRY_WARNING_DAYS", 30), type=int)
    if days < 0:
        raise ValidationError("days cannot be negative")
    cutoff = date.today() + timedelta(days=days)
    products = Product.query.filter(Product.expiry_date <= cutoff).order_by(Product.expiry_date).all()
    return _product_list(products)


@product_bp.route("/admin/<int:product_id>/visibility", methods=["PUT"])
@requires("product:toggle_visibility")
def toggle_visibility(product_id):
    product = _get_product(product_id)
    product.is_visible = not product.is_visible
    db.session.commit()
    state = "shown" if product.is_visible else "hidden"
    current_app.logger.info(f"Product {product.id} {state} in shop by {current_user.email}")
    return success(message=f"Product {state} in shop", product=product.to_dict())


# --- Admin or owning supplier ---

@product_bp.route("/", methods=["POST"])
@requires("product:create")
def create_product():
    """Add a product; admin products go straight to the shop, supplier products wait for approval."""
    form = validated(ProductForm)
    _check_expiry(form.expiry_date.data)

    actor = current_user._get_current_object()
    if actor.is_admin:
        supplier_id = form.supplier_id.data
        if supplier_id is not None and db.session.get(Supplier, supplier_id) is None:
            raise NotFound("Supplier not found")
    else:
        supplier_id = actor.supplier_profile.id

    product = Product(
        name=form.name.data,
        description=form.description.data,
        price=form.price.data,
        buying_price=form.buying_price.data,
        image=form.image.data or "",
        category=form.category.data,
        brand=form.brand.data,
        expiry_date=form.expiry_date.data,
        prescription_required=form.prescription_required.data,
        minimum_quantity=form.minimum_quantity.data or 10,
        reorder_point=form.reorder_point.data if form.reorder_point.data is not None else 5,
        supplier_id=supplier_id,
        supplier_product_code=form.supplier_product_code.data,
        supplier_price=form.supplier_price.data,
        supplier_discount=form.supplier_discount.data or 0,
        supplier_status=form.supplier_status.data or "active",
        is_visible=actor.is_admin,
    )
    product.set_quantity(form.quantity.data)
    db.session.add(product)
    db.session.commit()
    current_app.logger.info(f"Product {product.id} ({product.name}) created by {actor.email}")
    return success(201, message="Product created successfully", product=product.to_dict())


@product_bp.route("/<int:product_id>", methods=["PUT"])
@login_required
def update_product(product_id):
    product = _modifiable_product(product_id)
    data = json_body()
    form = validated(UpdateProductForm, data)

    # Blank values leave the stored value alone
    for field in UPDATABLE_FIELDS:
        value = getattr(form, field).data
        if isinstance(value, str) and not value.strip():
            continue
        if field in data and value is not None:
            setattr(product, field, value)
    if form.expiry_date.data:
        _check_expiry(form.expiry_date.data)
        product.expiry_date = form.expiry_date.data
    if "prescription_required" in data:
        product.prescription_required = form.prescription_required.data
    if form.quantity.data is not None:
        product.set_quantity(form.quantity.data)

    db.session.commit()
    return success(message="Product updated successfully", product=product.to_dict())


@product_bp.route("/<int:product_id>/quantity", methods=["PUT"])
@login_required
def update_product_quantity(product_id):
    product = _modifiable_product(product_id)
    form = validated(QuantityForm)
    set_stock(product.id, form.quantity.data)
    db.session.commit()
    current_app.logger.info(f"Stock for product {product.id} set to {product.quantity} by {current_user.email}")
    return success(message="Product quantity updated successfully", product=product.to_dict())


@product_bp.route("/<int:product_id>/image", methods=["POST"])
@login_required
def upload_product_image(product_id):
    product = _modifiable_product(product_id)
    upload = request.files.get("image")
    if upload is None or not upload.filename:
        raise ValidationError("No image file provided")
    product.image = save_product_image(upload, current_app, product)
    db.session.commit()
    return success(message="Product image updated", product=product.to_dict())


@product_bp.route("/<int:product_id>", methods=["DELETE"])
@login_required
def delete_product(product_id):
    product = _modifiable_product(product_id)
    if product.order_items:
        raise ValidationError("Cannot delete a product that appears in orders. Hide it instead.")
    # The catalog entry it came from can be transferred again
    SupplierProduct.query.filter_by(transferred_product_id=product.id).update({"transferred_product_id": None})
    db.session.delete(product)
    db.session.commit()
    current_app.logger.info(f"Product {product_id} deleted by {current_user.email}")
    return success(message="Product deleted successfully")
