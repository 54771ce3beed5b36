"""
Built-in handlers for the standard database field types.

Controls are named f_<fieldid> (plus a suffix for secondary controls).
Stored contents are dicts shaped like the entry WS returns them:
{"content": ..., "content1": ..., "files": [...]}
"""

from typing import Any, Dict, List, Optional

from ..template import FieldDescriptor
from .base import FieldPlugin
from .registry import register

# Separator used when several options are stored in a single content.
OPTIONS_SEPARATOR = "##"


def _stored(original: Any, key: str = "content") -> Any:
    if not original:
        return None
    return original.get(key)


def _edit_item(field: FieldDescriptor, value: Any, subfield: str = None) -> Dict[str, Any]:
    item = {"fieldid": field.id, "name": FieldPlugin.form_name(field), "value": value}
    if subfield is not None:
        item["subfield"] = subfield
    return item


@register("text", "textarea", "url", "number")
class TextField(FieldPlugin):
    """Single value typed in a text-like control."""

    def search_data(self, field, snapshot):
        name = self.form_name(field)
        if snapshot.get(name):
            return [{"name": name, "value": snapshot[name]}]
        return None

    def edit_data(self, field, snapshot, original=None):
        return [_edit_item(field, snapshot.get(self.form_name(field), ""))]

    def has_changed(self, field, snapshot, original=None):
        current = snapshot.get(self.form_name(field)) or ""
        initial = _stored(original) or ""
        return str(current) != str(initial)


@register("menu", "radiobutton")
class SingleChoiceField(FieldPlugin):
    """One option picked from a menu or radio group."""

    def search_data(self, field, snapshot):
        name = self.form_name(field)
        if snapshot.get(name):
            return [{"name": name, "value": snapshot[name]}]
        return None

    def edit_data(self, field, snapshot, original=None):
        return [_edit_item(field, snapshot.get(self.form_name(field), ""))]

    def has_changed(self, field, snapshot, original=None):
        return (snapshot.get(self.form_name(field)) or "") != (_stored(original) or "")


@register("checkbox", "multimenu")
class MultipleChoiceField(FieldPlugin):
    """Several options checked at once."""

    @staticmethod
    def selected(options: Any) -> List[str]:
        if isinstance(options, dict):
            return [value for value, checked in options.items() if checked]
        if isinstance(options, (list, tuple)):
            return list(options)
        return [options] if options else []

    def search_data(self, field, snapshot):
        name = self.form_name(field)
        values = self.selected(snapshot.get(name))
        if not values:
            return None
        all_required = self.selected(snapshot.get(self.form_name(field, "_allreq")))
        return [
            {"name": name, "value": values},
            {"name": self.form_name(field, "_allreq"), "value": bool(all_required)},
        ]

    def edit_data(self, field, snapshot, original=None):
        return [_edit_item(field, self.selected(snapshot.get(self.form_name(field))))]

    def has_changed(self, field, snapshot, original=None):
        current = sorted(self.selected(snapshot.get(self.form_name(field))))
        stored = _stored(original)
        initial = sorted(stored.split(OPTIONS_SEPARATOR)) if stored else []
        return current != initial


@register("file", "picture")
class FileField(FieldPlugin):
    """
    Attachments managed by the host file picker.

    The host keeps the files chosen for each field in this plugin via
    set_files(); until it does, the files stored in the entry are kept.
    Edit data carries them as a "files" attachment so the pipeline uploads
    them and replaces the value with the draft item id.
    """

    def __init__(self):
        self._files: Dict[int, List[Any]] = {}

    def set_files(self, field_id: int, files: List[Any]):
        self._files[field_id] = list(files)

    def get_files(self, field_id: int) -> List[Any]:
        return list(self._files.get(field_id, []))

    def current_files(self, field: FieldDescriptor, original: Any = None) -> List[Any]:
        """Files chosen by the user, or the stored ones when none were chosen."""
        if field.id in self._files:
            return self.get_files(field.id)
        return list(_stored(original, "files") or [])

    def clear_files(self, field_id: Optional[int] = None):
        if field_id is None:
            self._files.clear()
        else:
            self._files.pop(field_id, None)

    def edit_data(self, field, snapshot, original=None):
        files = self.current_files(field, original)
        items = [_edit_item(field, 0, subfield="file")]
        if files:
            items[0]["files"] = files
        if field.type == "picture":
            alttext = snapshot.get(self.form_name(field, "_alttext"), "")
            items.append(_edit_item(field, alttext, subfield="alttext"))
        return items

    def edit_files(self, field, snapshot, original=None):
        return self.get_files(field.id)

    def has_changed(self, field, snapshot, original=None):
        if field.type == "picture":
            current_alt = snapshot.get(self.form_name(field, "_alttext")) or ""
            if current_alt != (_stored(original, "content1") or ""):
                return True
        current = [_file_name(f) for f in self.current_files(field, original)]
        initial = [_file_name(f) for f in (_stored(original, "files") or [])]
        return current != initial


def _file_name(file: Any) -> str:
    if isinstance(file, dict):
        return file.get("filename") or file.get("name") or ""
    return getattr(file, "filename", None) or str(file)
