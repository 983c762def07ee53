from .connection import get_connection, init_database, transaction
from .local_storage import LocalStorage, StorageError

__all__ = ["get_connection", "init_database", "transaction", "LocalStorage", "StorageError"]
