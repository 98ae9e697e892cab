# Package exports - these allow cleaner imports like:
# from storefront.schemas import ProductCreate, ProductResponse
from storefront.schemas.product import (
    ProductCreate, ProductUpdate, ProductResponse, ProductListResponse,
    StockUpdate, StatusUpdate, StockUpdateResponse, MessageResponse,
)
from storefront.schemas.user import UserRegister, UserLogin, UserResponse, TokenResponse
from storefront.schemas.reservation import ReservationCreate, ReservationResponse, ReservationStatusResponse
from storefront.schemas.notification import NotificationResponse, NotificationListResponse, MarkAllReadResponse
from storefront.schemas.cart import CartItemAdd, CartItemUpdate, CartResponse
from storefront.schemas.order import CheckoutRequest, CustomerInfo, OrderResponse
