from .catalog import Employee, Item, StockLog, STOCK_TYPES, CONFIRMATION_MODES, STOCK_LOG_REASONS
from .sales import Sale, OrderItem, TokenSequence, PAYMENT_METHODS, ORDER_ITEM_STATUSES
from .costs import CostEntry, CostEntryItem, COST_TYPES

__all__ = [
    'Employee', 'Item', 'StockLog',
    'Sale', 'OrderItem', 'TokenSequence',
    'CostEntry', 'CostEntryItem',
    'STOCK_TYPES', 'CONFIRMATION_MODES', 'STOCK_LOG_REASONS',
    'PAYMENT_METHODS', 'ORDER_ITEM_STATUSES', 'COST_TYPES',
]
