from storefront.domain.core.enums import GatewayPaymentStatus, OrderStatus
from storefront.domain.catalog.models import Category, Product
from storefront.domain.coupon.models import Coupon
from storefront.domain.order.models import Order, OrderItem
from storefront.domain.user.models import User

__all__ = [
    "GatewayPaymentStatus",
    "OrderStatus",
    "Category",
    "Product",
    "Coupon",
    "Order",
    "OrderItem",
    "User",
]
