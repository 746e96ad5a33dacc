from .user import User, ROLES
from .supplier import Supplier, SupplierProduct, markup_price
from .product import Product, CATEGORIES, SUPPLIER_STATUSES
from .order import Order, OrderItem, ORDER_STATUSES
from .payment import Payment, PAYMENT_METHODS, PAYMENT_STATUSES
