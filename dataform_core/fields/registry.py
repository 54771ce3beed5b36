"""
Field handler registry - dispatches field operations to the plugin of each type.

A field type without a registered plugin is not an error: it simply
contributes nothing.
"""

import inspect
from typing import Any, Callable, Dict, List, Optional

from ..diagnostics import get_logger
from ..exceptions import RegistryError
from ..template import FieldDescriptor
from .base import FieldPlugin

logger = get_logger(__name__)


async def when(value: Any) -> Any:
    """Await value if it is awaitable, return it as is otherwise."""
    if inspect.isawaitable(value):
        return await value
    return value


class FieldsDelegate:
    """Registry of field plugins keyed by field type."""

    def __init__(self):
        self._handlers: Dict[str, FieldPlugin] = {}

    def register_handler(self, field_type: str, plugin: FieldPlugin) -> FieldPlugin:
        if not isinstance(plugin, FieldPlugin):
            raise RegistryError(
                f"Handler {type(plugin).__name__} must inherit from FieldPlugin"
            )
        if field_type in self._handlers:
            logger.warning(
                f"Overriding existing handler for field type '{field_type}': "
                f"{type(self._handlers[field_type]).__name__} -> {type(plugin).__name__}"
            )
        self._handlers[field_type] = plugin
        logger.debug(f"Registered handler '{type(plugin).__name__}' for field type '{field_type}'")
        return plugin

    def get_handler(self, field_type: str) -> Optional[FieldPlugin]:
        return self._handlers.get(field_type)

    def has_handler(self, field_type: str) -> bool:
        return field_type in self._handlers

    def list_types(self) -> List[str]:
        return list(self._handlers.keys())

    def unregister(self, field_type: str) -> bool:
        if field_type in self._handlers:
            del self._handlers[field_type]
            logger.debug(f"Unregistered field type '{field_type}'")
            return True
        return False

    def clear(self):
        self._handlers.clear()

    def get_field_search_data(self, field: FieldDescriptor, snapshot: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
        handler = self.get_handler(field.type)
        if handler is None:
            logger.debug(f"No handler for field type '{field.type}', skipping search data")
            return None
        return handler.search_data(field, snapshot)

    async def get_field_edit_data(self, field: FieldDescriptor, snapshot: Dict[str, Any], original: Any = None) -> Optional[List[Dict[str, Any]]]:
        handler = self.get_handler(field.type)
        if handler is None:
            logger.debug(f"No handler for field type '{field.type}', skipping edit data")
            return None
        return await when(handler.edit_data(field, snapshot, original))

    async def get_field_edit_files(self, field: FieldDescriptor, snapshot: Dict[str, Any], original: Any = None) -> List[Any]:
        handler = self.get_handler(field.type)
        if handler is None:
            return []
        return list(await when(handler.edit_files(field, snapshot, original)) or [])

    async def has_field_data_changed(self, field: FieldDescriptor, snapshot: Dict[str, Any], original: Any = None) -> bool:
        handler = self.get_handler(field.type)
        if handler is None:
            return False
        return bool(await when(handler.has_changed(field, snapshot, original)))


default_delegate = FieldsDelegate()


def register(*field_types: str, delegate: FieldsDelegate = None) -> Callable:
    """
    Class decorator registering a plugin for one or more field types.

    Usage:
        @register("text", "url")
        class TextField(FieldPlugin):
            ...
    """
    target = delegate or default_delegate

    def decorator(plugin_class):
        if not (inspect.isclass(plugin_class) and issubclass(plugin_class, FieldPlugin)):
            raise RegistryError(f"{plugin_class!r} must inherit from FieldPlugin")
        types = field_types or plugin_class.types
        if not types:
            raise RegistryError(f"No field type given for {plugin_class.__name__}")
        plugin = plugin_class()
        for field_type in types:
            target.register_handler(field_type, plugin)
        return plugin_class

    return decorator
