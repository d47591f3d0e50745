from .user import User
from .product import Product
from .inventory import Inventory
from .sale_transaction import SaleTransaction
from .sale_item import SaleItem
from .demand_prediction import DemandPrediction
from .product_risk_snapshot import ProductRiskSnapshot
from .notification import Notification
from .online_order import OnlineOrder

__all__ = [
    'User',
    'Product',
    'Inventory',
    'SaleTransaction',
    'SaleItem',
    'DemandPrediction',
    'ProductRiskSnapshot',
    'Notification',
    'OnlineOrder'
]
