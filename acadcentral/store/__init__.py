from . import keys
from .local_store import LocalStore

__all__ = ["LocalStore", "keys"]
