"""Import all models so Base.metadata knows every table."""
from lending_chat.infrastructure.db.models.item import ItemModel
from lending_chat.infrastructure.db.models.message import MessageModel
from lending_chat.infrastructure.db.models.request import RequestModel
from lending_chat.infrastructure.db.models.user import UserModel

__all__ = [
    "ItemModel",
    "MessageModel",
    "RequestModel",
    "UserModel",
]
