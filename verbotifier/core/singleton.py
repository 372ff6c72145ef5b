# -----------------------------------------------------------------------------
# metaclass-based singleton: Class.get_instance() or Class() return one object
# -----------------------------------------------------------------------------
from __future__ import annotations

from typing import Dict


class Singleton(type):
    _instances: Dict[type, object] = {}

    def __call__(cls, *args, **kwargs):
        return cls.get_instance(*args, **kwargs)

    def get_instance(cls, *args, **kwargs):
        if cls not in cls._instances:
            cls._instances[cls] = super(Singleton, cls).__call__(*args, **kwargs)
        return cls._instances[cls]

    def drop_instance(cls):
        cls._instances.pop(cls, None)
