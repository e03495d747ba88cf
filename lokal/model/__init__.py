# ------ lokal/model/__init__.py ------

from .receipt import Receipt
from .notification import Notification, NotificationPreference

__all__ = [
    "Receipt",
    "Notification",
    "NotificationPreference",
]
