# Package exports - these allow cleaner imports like:
# from storefront.models import Product, Reservation
# Used by alembic/env.py for migration autogenerate
from storefront.models.product import Product
from storefront.models.user import User
from storefront.models.reservation import Reservation
from storefront.models.notification import Notification
from storefront.models.cart import CartItem
from storefront.models.order import Order
