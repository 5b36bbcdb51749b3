from .collection import KeyedCollection
from .config import Config, load_config, close_log_file
from .exceptions import SelfMapError, ItemNotFound

__all__ = ["KeyedCollection", "Config", "load_config", "close_log_file", "SelfMapError", "ItemNotFound"]
