"""
Field plugins - per field type interpretation of the form snapshot.
"""

from .base import FieldPlugin
from .registry import FieldsDelegate, default_delegate, register, when
from . import builtin

__all__ = [
    "FieldPlugin",
    "FieldsDelegate",
    "default_delegate",
    "register",
    "when",
    "builtin",
]
