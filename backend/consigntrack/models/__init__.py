from .tenancy import User, Store, StoreBalance
from .inventory import Product, StorePricing, InventoryLog, InventoryLogLine
from .sales import SalesRecord, SalesRecordLine, Payment
from .activity import ActivityLogEntry

__all__ = [
    'User', 'Store', 'StoreBalance',
    'Product', 'StorePricing', 'InventoryLog', 'InventoryLogLine',
    'SalesRecord', 'SalesRecordLine', 'Payment',
    'ActivityLogEntry',
]
