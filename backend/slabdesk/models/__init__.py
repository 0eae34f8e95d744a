from .catalog import GlobalAsset, CardSale, UserAsset
from .contacts import Contact, Seller
from .events import Event, EVENT_STATUSES
from .buying_desk import (
    BuySession,
    EvaluationAsset,
    CartEntry,
    PurchaseTransaction,
    BUY_SESSION_STATUSES,
    PAYMENT_METHODS,
)

__all__ = [
    'GlobalAsset', 'CardSale', 'UserAsset',
    'Contact', 'Seller',
    'Event', 'EVENT_STATUSES',
    'BuySession', 'EvaluationAsset', 'CartEntry', 'PurchaseTransaction',
    'BUY_SESSION_STATUSES', 'PAYMENT_METHODS',
]
