"""
Core field plugin base class
"""

from abc import ABC
from typing import Any, Dict, List, Optional

from ..template import FieldDescriptor


class FieldPlugin(ABC):
    """
    Base class for field type handlers

    Handlers interpret the form snapshot for one field type. Every hook may
    be a plain method or a coroutine; the delegate awaits whatever it gets.
    Returning None means "no contribution".
    """

    # Field types handled by this plugin, used by @register when no type given
    types: tuple = ()

    @staticmethod
    def form_name(field: FieldDescriptor, suffix: str = "") -> str:
        """Name of the form control(s) rendered for a field."""
        return f"f_{field.id}{suffix}"

    def search_data(self, field: FieldDescriptor, snapshot: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
        """Items to send to the search WS for this field."""
        return None

    def edit_data(self, field: FieldDescriptor, snapshot: Dict[str, Any], original: Any = None) -> Optional[List[Dict[str, Any]]]:
        """Items to send to the add/update entry WS for this field."""
        return None

    def edit_files(self, field: FieldDescriptor, snapshot: Dict[str, Any], original: Any = None) -> List[Any]:
        """Temporary files added by the user for this field."""
        return []

    def has_changed(self, field: FieldDescriptor, snapshot: Dict[str, Any], original: Any = None) -> bool:
        """Whether the user changed the field compared with the stored content."""
        return False
