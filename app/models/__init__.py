# app/models/__init__.py
from .user import User
from .folder import Folder
from .document import Document
from .favorite import Favorite
from .share import ShareEntry
from .contact import Contact
from .activity import Activity
from .notification import Notification

__all__ = ['User', 'Folder', 'Document', 'Favorite', 'ShareEntry', 'Contact', 'Activity', 'Notification']
