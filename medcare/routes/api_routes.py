from datetime import date, timedelta
from flask import Blueprint, current_app, jsonify, send_file
from io import BytesIO
from sqlalchemy import func

from medcare.extensions import db
from medcare.models import User, Supplier, Product, Order
from medcare.policies import requires
from medcare.reports import build_report, category_distribution
from medcare.routes.utils import success

api_bp = Blueprint("api", __name__, url_prefix="/api")


@api_bp.route("/dashboard/overview", methods=["GET"])
@requires("dashboard:view")
def dashboard_overview():
    """Headline numbers for the admin dashboard."""
    days = current_app.config.get("DASHBOARD_EXPIRY_DAYS", 10)
    today = date.today()
    revenue = db.session.query(func.sum(Order.total_amount)).filter(Order.status != "Cancelled").scalar()
    expiring = (
        Product.query.filter(Product.expiry_date <= today + timedelta(days=days))
        .order_by(Product.expiry_date)
        .all()
    )
    recent_orders = Order.query.order_by(Order.order_date.desc()).limit(5).all()

    overview_data = {
        "total_users": User.query.count(),
        "total_orders": Order.query.count(),
        "total_revenue": round(revenue, 2) if revenue else 0,
        "total_products": Product.query.count(),
        "total_suppliers": Supplier.query.count(),
        "open_orders": Order.query.filter(Order.status.in_(["Pending", "Processing", "Shipped"])).count(),
        "expiring_products": [
            {"id": p.id, "name": p.name, "expiry_date": p.expiry_date.isoformat(),
             "days_left": p.days_until_expiry(today), "quantity": p.quantity}
            for p in expiring
        ],
        "recent_orders": [
            {"id": o.id, "customer": o.contact_name, "total_amount": o.total_amount,
             "status": o.status, "order_date": o.order_date.isoformat()}
            for o in recent_orders
        ],
        "category_distribution": category_distribution(Product.query.all()),
    }
    return success(overview=overview_data)


@api_bp.route("/reports/<kind>", methods=["GET"])
@requires("report:view")
def download_report(kind):
    filename, pdf = build_report(kind, current_app.config)
    current_app.logger.info(f"Generated {kind} report ({len(pdf)} bytes)")
    return send_file(BytesIO(pdf), mimetype="application/pdf", as_attachment=True, download_name=filename)


# A simple health check endpoint for the API
@api_bp.route("/health", methods=["GET"])
def health_check():
    return jsonify({"success": True, "status": "API is healthy"}), 200
