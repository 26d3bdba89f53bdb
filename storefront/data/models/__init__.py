#import all models so SQLAlchemy registers them in Base.metadata

from storefront.data.models.user import UserModel, PaymentMethodModel
from storefront.data.models.product import ProductModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel, OrderLineModel

__all__ = [
    "UserModel",
    "PaymentMethodModel",
    "ProductModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderLineModel",
]
