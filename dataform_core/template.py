"""
Template placeholder substitution.

Entry templates are authored HTML with literal placeholders:

    [[fieldname]]       render point for a field
    [[fieldname#id]]    anchor id of the rendered field (edit mode only)
    ##firstname##       built-in author search inputs (search mode only)

Placeholders are replaced by field-render markers understood by the host.
Placeholders with no matching field are left untouched.
"""

import html
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from .config import config


# Not pluggable search elements: input name -> author sub-field.
SEARCH_OTHER: Dict[str, str] = {
    'fn': 'firstname',
    'ln': 'lastname',
}

SEARCH_MODE = "search"
EDIT_MODE = "edit"

FIELD_TAG = "mma-mod-data-field"

# Characters escaped before a field name is used inside a matcher.
_SPECIAL_CHARS = re.compile(r"[\-\[\]/{}()*+?.\\^$|]")


@dataclass(frozen=True)
class FieldDescriptor:
    """One question of the entry form."""
    id: int
    name: str
    type: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldDescriptor":
        return cls(id=int(data["id"]), name=str(data["name"]), type=str(data["type"]))


def escape_token(token: str) -> str:
    """Escape regex metacharacters so the token matches literally."""
    return _SPECIAL_CHARS.sub(lambda m: "\\" + m.group(0), token)


def _placeholder(text: str) -> "re.Pattern":
    return re.compile(escape_token(text))


def _replace_all(template: str, token: str, replacement: str) -> str:
    # A callable replacement keeps backslashes in the marker literal.
    return _placeholder(token).sub(lambda _m: replacement, template)


def search_marker(field: FieldDescriptor) -> str:
    return f'<{FIELD_TAG} mode="search" field="fields[{field.id}]"></{FIELD_TAG}>'


def edit_marker(field: FieldDescriptor) -> str:
    return (
        f'<{FIELD_TAG} mode="edit" field="fields[{field.id}]" '
        f'value="entryContents[{field.id}]" database="data" '
        f'error="errors[{field.id}]"></{FIELD_TAG}>'
    )


def anchor_id(field: FieldDescriptor) -> str:
    return f"field_{field.id}"


def _author_input(name: str, author_field: str, translate: Optional[Callable[[str], str]]) -> str:
    key = f"{config.strings_prefix}author{author_field}"
    if translate is not None:
        label = html.escape(translate(key) or key, quote=True)
    else:
        label = "{{ '" + key + "' | translate }}"
    return f'<input type="text" name="{name}" placeholder="{label}">'


def display_search_fields(
    template: str,
    fields: Iterable[FieldDescriptor],
    translate: Optional[Callable[[str], str]] = None,
) -> str:
    """
    Render the advanced search template.

    Args:
        template: Template HTML
        fields: Fields that define every content in the entry
        translate: Optional translator for the author input labels. When
            omitted the label is left as a translate expression for the host.

    Returns:
        Generated HTML
    """
    for field in fields:
        template = _replace_all(template, f"[[{field.name}]]", search_marker(field))

    for name, author_field in SEARCH_OTHER.items():
        tokens = [f"##{author_field}##", f"##{name}##"]
        if not any(token in template for token in tokens):
            continue
        render = _author_input(name, author_field, translate)
        for token in tokens:
            template = _replace_all(template, token, render)

    return template


def display_edit_fields(template: str, fields: Iterable[FieldDescriptor]) -> str:
    """
    Render the add/edit entry template.

    Args:
        template: Template HTML
        fields: Fields that define every content in the entry

    Returns:
        Generated HTML
    """
    for field in fields:
        template = _replace_all(template, f"[[{field.name}]]", edit_marker(field))
        template = _replace_all(template, f"[[{field.name}#id]]", anchor_id(field))
    return template


def substitute(template: str, fields: Iterable[FieldDescriptor], mode: str, **kwargs) -> str:
    """Replace field placeholders for the given mode ("search" or "edit")."""
    if mode == SEARCH_MODE:
        return display_search_fields(template, fields, **kwargs)
    if mode == EDIT_MODE:
        return display_edit_fields(template, fields)
    raise ValueError(f"Unknown template mode: {mode!r}")
