from .db import Database
from .store import Store, open_store

__all__ = ["Database", "Store", "open_store"]
