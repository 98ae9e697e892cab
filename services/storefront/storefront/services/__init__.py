# Package exports - these allow cleaner imports like:
# from storefront.services import InventoryService, ReservationService
from storefront.services.reservation_service import ReservationService
from storefront.services.notification_service import NotificationService
from storefront.services.inventory_service import InventoryService, StockChange
from storefront.services.product_service import ProductService
from storefront.services.user_service import UserService
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService
