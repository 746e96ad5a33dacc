"""PDF reports for the admin area.

Each report is a title, a header row and one row per record, rendered with
reportlab platypus. ``product_analytics`` and ``category_distribution`` are
plain aggregations shared with the dashboard.
"""
from collections import OrderedDict
from datetime import date, datetime
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from medcare.errors import NotFound
from medcare.models import User, Supplier, Product, Order, Payment

BRAND = "MedCare"
BRAND_COLOR = colors.HexColor("#2c8ba3")


def format_lkr(amount):
    return f"LKR {amount or 0:,.2f}"


def format_date(value):
    return value.strftime("%Y-%m-%d") if value else "N/A"


def product_analytics(products, low_stock_threshold=10, today=None):
    """Overall and per-category stock figures.

    Returns a list of dicts, the first one for all products, then one per
    category in order of first appearance.
    """
    today = today or date.today()

    def empty(section):
        return {"section": section, "total_products": 0, "total_value": 0.0,
                "low_stock_products": 0, "expired_products": 0, "visible_products": 0}

    overall = empty("Overall Statistics")
    per_category = OrderedDict()
    for product in products:
        stats = per_category.setdefault(product.category, empty(product.category))
        for bucket in (overall, stats):
            bucket["total_products"] += 1
            bucket["total_value"] += product.price * product.quantity
            if product.quantity <= low_stock_threshold:
                bucket["low_stock_products"] += 1
            if product.expiry_date and product.expiry_date <= today:
                bucket["expired_products"] += 1
            if product.is_visible:
                bucket["visible_products"] += 1

    result = [overall] + list(per_category.values())
    for row in result:
        row["total_value"] = round(row["total_value"], 2)
    return result


def category_distribution(products):
    counts = OrderedDict()
    for product in products:
        counts[product.category] = counts.get(product.category, 0) + 1
    return [{"category": category, "count": count} for category, count in counts.items()]


def _draw_page(canvas, doc):
    # Watermark, then footer
    canvas.saveState()
    width, height = doc.pagesize
    canvas.setFillColor(BRAND_COLOR, alpha=0.15)
    canvas.setFont("Helvetica-Bold", 70)
    canvas.translate(width / 2, height / 2)
    canvas.rotate(45)
    canvas.drawCentredString(0, 0, BRAND)
    canvas.restoreState()

    canvas.saveState()
    canvas.setFillColor(BRAND_COLOR)
    canvas.setFont("Helvetica", 8)
    canvas.drawCentredString(width / 2, 20, f"© {datetime.utcnow().year} {BRAND}. All rights reserved.")
    canvas.drawRightString(width - 36, 20, f"Page {doc.page}")
    canvas.restoreState()


def render_table_report(title, headers, rows, wide=False):
    """Render a single-table report and return the PDF bytes."""
    buffer = BytesIO()
    pagesize = landscape(A4) if wide else A4
    doc = SimpleDocTemplate(buffer, pagesize=pagesize, leftMargin=36, rightMargin=36,
                            topMargin=48, bottomMargin=48, title=title, author=BRAND)
    styles = getSampleStyleSheet()
    brand_style = styles["Title"].clone("Brand", textColor=BRAND_COLOR)
    title_style = styles["Heading2"].clone("ReportTitle", textColor=BRAND_COLOR, alignment=1)
    meta_style = styles["Italic"].clone("Meta", textColor=BRAND_COLOR, alignment=1)

    story = [
        Paragraph(f"<b>{BRAND}</b>", brand_style),
        Paragraph(title, title_style),
        Paragraph(f"Generated on: {date.today().isoformat()}", meta_style),
        Spacer(1, 12),
    ]

    body = [[str(cell) for cell in row] for row in rows]
    footer = [f"Total Records: {len(rows)}"] + [""] * (len(headers) - 1)
    table = Table([headers] + body + [footer], repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), BRAND_COLOR),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("ALIGN", (0, 0), (-1, 0), "CENTER"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -2), 0.25, BRAND_COLOR),
        ("SPAN", (0, -1), (-1, -1)),
        ("ALIGN", (0, -1), (-1, -1), "CENTER"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("TEXTCOLOR", (0, 1), (-1, -1), BRAND_COLOR),
    ]))
    story.append(table)

    doc.build(story, onFirstPage=_draw_page, onLaterPages=_draw_page)
    return buffer.getvalue()


# --- Datasets ---

def _users_report(config):
    users = User.query.order_by(User.date_created.desc()).all()
    rows = [[f"#{u.id}", u.full_name, u.email, u.phone or "N/A", u.address or "N/A",
             u.role.capitalize(), format_date(u.date_created)] for u in users]
    return "User Report", ["User ID", "Name", "Email", "Phone", "Address", "Role", "Joined Date"], rows


def _suppliers_report(config):
    suppliers = Supplier.query.order_by(Supplier.date_added.desc()).all()
    rows = []
    for s in suppliers:
        categories = {p.category for p in s.products}
        rows.append([f"#{s.id}", s.user.full_name, s.user.company_name or "N/A", s.user.email,
                     len(s.products), len(categories), len(s.inventory_products)])
    headers = ["Supplier ID", "Name", "Company", "Email", "Catalog Products", "Categories", "Inventory Products"]
    return "Supplier Report", headers, rows


def _products_report(config):
    products = Product.query.order_by(Product.category, Product.name).all()
    rows = [[p.name, p.category, format_lkr(p.price),
             p.supplier.user.full_name if p.supplier else "N/A",
             format_date(p.expiry_date), p.quantity, "Visible" if p.is_visible else "Hidden"] for p in products]
    headers = ["Product Name", "Category", "Price (LKR)", "Supplier", "Expiry Date", "Quantity", "Status"]
    return "Product Inventory Report", headers, rows


def _orders_report(config):
    orders = Order.query.order_by(Order.order_date.desc()).all()
    rows = [[f"#{o.id}", o.contact_name, format_lkr(o.total_amount), o.status,
             o.payment_status or "N/A", format_date(o.order_date)] for o in orders]
    headers = ["Order ID", "Customer", "Total Amount (LKR)", "Status", "Payment", "Order Date"]
    return "Order Report", headers, rows


def _payments_report(config):
    payments = Payment.query.order_by(Payment.date_created.desc()).all()
    rows = [[p.payment_id, p.user.full_name if p.user else "N/A", format_lkr(p.amount),
             "Card" if p.payment_method == "card" else "Cash on Delivery", p.status,
             p.date_created.strftime("%Y-%m-%d %H:%M") if p.date_created else "N/A"] for p in payments]
    headers = ["Payment ID", "Customer", "Amount", "Method", "Status", "Date"]
    return "Payment Report", headers, rows


def _product_analytics_report(config):
    threshold = config.get("LOW_STOCK_THRESHOLD", 10)
    stats = product_analytics(Product.query.all(), low_stock_threshold=threshold)
    rows = [[s["section"], s["total_products"], format_lkr(s["total_value"]), s["low_stock_products"],
             s["expired_products"], s["visible_products"]] for s in stats]
    headers = ["Category", "Total Products", "Total Inventory Value", "Low Stock Products",
               "Expired Products", "Visible Products"]
    return "Product Analytics Report", headers, rows


REPORTS = {
    "users": _users_report,
    "suppliers": _suppliers_report,
    "products": _products_report,
    "orders": _orders_report,
    "payments": _payments_report,
    "product-analytics": _product_analytics_report,
}


def build_report(kind, config):
    """Return ``(filename, pdf_bytes)`` for a report kind."""
    dataset = REPORTS.get(kind)
    if dataset is None:
        raise NotFound(f"Unknown report: {kind}")
    title, headers, rows = dataset(config)
    pdf = render_table_report(title, headers, rows, wide=len(headers) > 6)
    return f"{kind}-report-{date.today().isoformat()}.pdf", pdf
