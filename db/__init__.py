from .database import get_conn, get_db, init_db
from .store import CatalogStore, StorageFailure, get_store

__all__ = ['get_conn', 'get_db', 'init_db', 'CatalogStore', 'StorageFailure', 'get_store']
