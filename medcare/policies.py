"""Who may do what.

Handlers ask ``authorizer.ensure(current_user, action, resource)`` once per
request instead of branching on roles themselves.
"""
from functools import wraps

from flask_login import current_user, login_required

from medcare.errors import Forbidden


class Authorizer:
    def __init__(self):
        self._rules = {}

    def rule(self, action, message=None):
        """Register ``check(actor, resource) -> bool`` for ``action``."""
        def decorator(check):
            self._rules[action] = (check, message)
            return check
        return decorator

    def can_perform(self, actor, action, resource=None):
        if actor is None or not getattr(actor, "is_authenticated", False):
            return False
        if action not in self._rules:
            raise KeyError(f"No authorization rule for {action!r}")
        check, _ = self._rules[action]
        return bool(check(actor, resource))

    def ensure(self, actor, action, resource=None):
        if not self.can_perform(actor, action, resource):
            _, message = self._rules.get(action, (None, None))
            raise Forbidden(message)


authorizer = Authorizer()


def requires(action):
    """Route decorator: token required, then ``action`` checked without a resource."""
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            authorizer.ensure(current_user._get_current_object(), action)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def _is_admin(actor, resource=None):
    return actor.is_admin


def _owns_product(actor, product):
    profile = actor.supplier_profile
    return profile is not None and product is not None and product.supplier_id == profile.id


# --- Users ---
authorizer.rule("user:manage", "Not authorized as an admin")(_is_admin)

# --- Suppliers ---
authorizer.rule("supplier:manage", "Not authorized as an admin")(_is_admin)

# --- Products ---
authorizer.rule("product:view_all", "Only admins can access all products")(_is_admin)
authorizer.rule("product:view_reports", "Only admins can access stock reports")(_is_admin)
authorizer.rule("product:toggle_visibility", "Only admins can manage product visibility")(_is_admin)


@authorizer.rule("product:create", "Only admins or suppliers can create products")
def _can_create_product(actor, resource=None):
    return actor.is_admin or (actor.is_supplier and actor.supplier_profile is not None)


@authorizer.rule("product:modify", "Not authorized to modify this product")
def _can_modify_product(actor, product):
    return actor.is_admin or (actor.is_supplier and _owns_product(actor, product))


@authorizer.rule("product:list_own", "Only suppliers can access their products")
def _is_supplier(actor, resource=None):
    return actor.is_supplier


# --- Orders ---
authorizer.rule("order:view_all", "Not authorized as an admin")(_is_admin)
authorizer.rule("order:update", "Not authorized as an admin")(_is_admin)
authorizer.rule("order:view_supplier", "Not authorized as a supplier")(_is_supplier)


@authorizer.rule("order:view", "Not authorized to access this order")
def _can_view_order(actor, order):
    return actor.is_admin or order.user_id == actor.id


@authorizer.rule("order:delete", "Not authorized to delete this order")
def _can_delete_order(actor, order):
    return actor.is_admin or order.user_id == actor.id


# --- Payments ---
authorizer.rule("payment:view_all", "Not authorized as an admin")(_is_admin)
authorizer.rule("payment:update", "Not authorized as an admin")(_is_admin)


@authorizer.rule("payment:create", "Not authorized to pay for this order")
def _can_pay(actor, order):
    return actor.is_admin or order.user_id == actor.id


@authorizer.rule("payment:view", "Not authorized to view this payment")
def _can_view_payment(actor, payment):
    return actor.is_admin or payment.user_id == actor.id


# --- Reports & dashboard ---
authorizer.rule("report:view", "Not authorized as an admin")(_is_admin)
authorizer.rule("dashboard:view", "Not authorized as an admin")(_is_admin)
