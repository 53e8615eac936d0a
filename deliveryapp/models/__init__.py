from deliveryapp.models.category import Category
from deliveryapp.models.product import Product, ProductAddOn
from deliveryapp.models.add_on import AddOn
from deliveryapp.models.order import Order
from deliveryapp.models.order_item import OrderItem
from deliveryapp.models.setting import Setting
from deliveryapp.models.user import User, UserRole

# table name -> model, used by the record store
TABLES = {
    "categories": Category,
    "products": Product,
    "add_ons": AddOn,
    "product_add_ons": ProductAddOn,
    "orders": Order,
    "order_items": OrderItem,
    "settings": Setting,
    "users": User,
    "user_roles": UserRole,
}
