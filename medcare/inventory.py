"""Stock mutations on products.

Every change is a single conditional UPDATE so the quantity check and the
write happen in one statement; ``out_of_stock`` is computed from the same
expression. Callers own the transaction and roll back on error.
"""
from datetime import datetime

from flask import current_app
from sqlalchemy import update, case

from medcare.extensions import db
from medcare.models.product import Product
from medcare.errors import InsufficientStock, NotFound


def _refresh(product_id):
    product = db.session.get(Product, product_id)
    if product is not None:
        db.session.refresh(product, ["quantity", "out_of_stock", "last_restocked"])
    return product


def decrement_stock(product, quantity):
    """Take ``quantity`` units out of ``product``; raises InsufficientStock if it cannot cover them."""
    new_quantity = Product.quantity - quantity
    stmt = (
        update(Product)
        .where(Product.id == product.id, Product.quantity >= quantity)
        .values(quantity=new_quantity, out_of_stock=case((new_quantity <= 0, True), else_=False))
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount != 1:
        raise InsufficientStock(product.name)
    _refresh(product.id)
    current_app.logger.info(f"Stock for product {product.id} decreased by {quantity}")
    return product


def restore_stock(product_id, quantity):
    """Put ``quantity`` units back; a product that no longer exists is skipped."""
    new_quantity = Product.quantity + quantity
    stmt = (
        update(Product)
        .where(Product.id == product_id)
        .values(
            quantity=new_quantity,
            out_of_stock=case((new_quantity <= 0, True), else_=False),
            last_restocked=datetime.utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount != 1:
        current_app.logger.warning(f"Product {product_id} not found while restoring {quantity} units")
        return None
    current_app.logger.info(f"Stock for product {product_id} restored by {quantity}")
    return _refresh(product_id)


def set_stock(product_id, quantity):
    """Overwrite the quantity of a product (manual stock take)."""
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found")
    product.set_quantity(quantity)
    return product
