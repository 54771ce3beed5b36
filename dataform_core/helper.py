"""
Database entry form helper.

Turns the live state of a search or edit form into the payloads the web
services expect, detects whether the user edited an entry, and locates an
entry inside the ordered entry list.

Usage:
    helper = DataHelper(uploader=client, entries_source=client)

    search = helper.get_search_data_from_form(form, fields)
    edit = await helper.get_edit_data_from_form(form, fields, data_id, contents)
    changed = await helper.has_edit_data_changed(form, fields, contents)
    info = await helper.get_page_info_by_entry(data_id, entry_id, group_id)
"""

import asyncio
import json
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from . import template
from .config import Config, config as default_config
from .diagnostics import get_logger
from .exceptions import DataFormError
from .fields import FieldsDelegate, default_delegate
from .form_snapshot import Form, get_form_data, has_elements
from .pagination import PageInfo, locate_by_entry, locate_by_page
from .template import SEARCH_OTHER, FieldDescriptor
from .ws_client import EntriesSource, FileUploader

logger = get_logger(__name__)


def _original(entry_contents: Optional[Mapping[Any, Any]], field: FieldDescriptor) -> Any:
    if not entry_contents:
        return None
    if field.id in entry_contents:
        return entry_contents[field.id]
    return entry_contents.get(str(field.id))


def to_json(value: Any) -> str:
    """Compact JSON text, the same bytes a browser's JSON.stringify produces."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def is_blank(value: Any) -> bool:
    """Values left unencoded in edit items; empty lists and dicts are still encoded."""
    if isinstance(value, (list, tuple, dict)):
        return False
    return value is None or value == "" or value is False or value == 0


async def gather_or_cancel(*aws) -> List[Any]:
    """
    Run awaitables concurrently, failing on the first error.

    Siblings still running when one fails are cancelled, and errors of
    siblings that already failed are collected so they are not reported
    as never retrieved.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
            elif not task.cancelled():
                task.exception()
        raise


class DataHelper:
    """Form data helper bound to a field delegate and its WS collaborators."""

    def __init__(
        self,
        delegate: FieldsDelegate = None,
        uploader: FileUploader = None,
        entries_source: EntriesSource = None,
        cfg: Config = None,
    ):
        self.delegate = delegate or default_delegate
        self.uploader = uploader
        self.entries_source = entries_source
        self.cfg = cfg or default_config
        self.search_other: Dict[str, str] = dict(SEARCH_OTHER)

    # Templates

    def display_advanced_search_fields(
        self,
        html: str,
        fields: Sequence[FieldDescriptor],
        translate: Optional[Callable[[str], str]] = None,
    ) -> str:
        return template.display_search_fields(html, fields, translate)

    def display_edit_fields(self, html: str, fields: Sequence[FieldDescriptor]) -> str:
        return template.display_edit_fields(html, fields)

    # Search

    def get_search_data_from_form(self, form: Optional[Form], fields: Sequence[FieldDescriptor]) -> List[Dict[str, Any]]:
        """
        Retrieve the data entered in the advanced search form.

        Args:
            form: Form whose controls are read
            fields: Fields that define every content in the entry

        Returns:
            Search items with JSON-encoded values
        """
        if not has_elements(form):
            return []

        searched_data = get_form_data(form)

        advanced_search: List[Dict[str, Any]] = []
        for field in fields:
            field_data = self.delegate.get_field_search_data(field, searched_data)
            if not field_data:
                continue
            for data in field_data:
                # WS wants values in Json format.
                item = dict(data)
                item["value"] = to_json(item.get("value"))
                advanced_search.append(item)

        # Not pluggable search elements.
        for name in self.search_other:
            if searched_data.get(name):
                advanced_search.append({
                    "name": name,
                    "value": to_json(searched_data[name]),
                })

        return advanced_search

    # Edit

    async def get_edit_data_from_form(
        self,
        form: Optional[Form],
        fields: Sequence[FieldDescriptor],
        data_id: Optional[int] = None,
        entry_contents: Optional[Mapping[Any, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Retrieve the data entered in the edit form.

        Field plugins are queried concurrently. Items carrying files are
        uploaded first when data_id is set and their value becomes the draft
        item id. Any failure aborts the whole assembly.

        Args:
            form: Form whose controls are read
            fields: Fields that define every content in the entry
            data_id: Database id. If set, files are uploaded
            entry_contents: Original entry contents indexed by field id

        Returns:
            Edit items in field order, values JSON-encoded
        """
        if not has_elements(form):
            return []

        form_data = get_form_data(form)

        per_field = await gather_or_cancel(*[
            self._field_edit_data(field, form_data, data_id, _original(entry_contents, field))
            for field in fields
        ])

        edit: List[Dict[str, Any]] = []
        for items in per_field:
            edit.extend(items)
        return edit

    async def _field_edit_data(
        self,
        field: FieldDescriptor,
        form_data: Dict[str, Any],
        data_id: Optional[int],
        original: Any,
    ) -> List[Dict[str, Any]]:
        field_data = await self.delegate.get_field_edit_data(field, form_data, original)
        if not field_data:
            return []
        return list(await gather_or_cancel(*[
            self._prepare_item(dict(data), data_id) for data in field_data
        ]))

    async def _prepare_item(self, data: Dict[str, Any], data_id: Optional[int]) -> Dict[str, Any]:
        # Upload files if asked.
        if data_id and data.get("files"):
            item_id = await self.upload_or_store_files(data_id, 0, None, data.pop("files"))
            data["value"] = item_id

        # WS wants values in Json format.
        if not is_blank(data.get("value")):
            data["value"] = to_json(data["value"])
        if data.get("subfield") is None:
            data["subfield"] = ""
        return data

    async def get_edit_tmp_files(
        self,
        form: Optional[Form],
        fields: Sequence[FieldDescriptor],
        entry_contents: Optional[Mapping[Any, Any]] = None,
    ) -> List[Any]:
        """Temp files to be uploaded, in field order."""
        if not has_elements(form):
            return []

        form_data = get_form_data(form)

        fields_files = await gather_or_cancel(*[
            self.delegate.get_field_edit_files(field, form_data, _original(entry_contents, field))
            for field in fields
        ])

        files: List[Any] = []
        for field_files in fields_files:
            files.extend(field_files)
        return files

    async def has_edit_data_changed(
        self,
        form: Optional[Form],
        fields: Sequence[FieldDescriptor],
        entry_contents: Optional[Mapping[Any, Any]] = None,
    ) -> bool:
        """
        Check if data has been changed by the user.

        The first field reporting a change, or failing to answer, settles
        the result as changed without waiting for the remaining fields.
        """
        if not has_elements(form):
            return False

        input_data = get_form_data(form)

        checks = [
            asyncio.ensure_future(
                self.delegate.has_field_data_changed(field, input_data, _original(entry_contents, field))
            )
            for field in fields
        ]
        try:
            for check in asyncio.as_completed(checks):
                try:
                    changed = await check
                except Exception as e:
                    logger.debug(f"Change check failed, treating entry as changed: {e}")
                    return True
                if changed:
                    return True
            return False
        finally:
            for check in checks:
                if not check.done():
                    check.cancel()

    # Files

    async def upload_or_store_files(
        self,
        data_id: int,
        item_id: int = 0,
        timecreated: Optional[int] = None,
        files: Sequence[Any] = (),
        offline: bool = False,
        site_id: Optional[str] = None,
    ) -> int:
        """
        Upload or store some files, depending if the user is offline or not.

        Args:
            data_id: Database id
            item_id: Draft id to use. 0 to create a new draft id
            timecreated: The time the entry was created
            files: List of files
            offline: True if files should be stored for offline
            site_id: Site id. Current site if not defined

        Returns:
            Draft item id
        """
        if offline:
            # TODO: store files for offline sync once an offline store exists.
            logger.warning(f"Offline storage not available for database {data_id}, uploading instead")
        if self.uploader is None:
            raise DataFormError("No file uploader configured")
        return await self.uploader.upload_or_reupload_files(files, self.cfg.component, item_id, site_id)

    # Pagination

    async def get_all_entries_ids(self, data_id: int, group_id: int = 0, site_id: Optional[str] = None) -> List[Any]:
        """Fetch all entries and return their ids, in order."""
        if self.entries_source is None:
            raise DataFormError("No entries source configured")
        entries = await self.entries_source.fetch_all_entries(data_id, group_id, site_id)
        return [entry["id"] for entry in entries]

    async def get_page_info_by_entry(
        self,
        data_id: int,
        entry_id: Any,
        group_id: int = 0,
        site_id: Optional[str] = None,
    ) -> Optional[PageInfo]:
        """Page info of an entry, None if the entry is not in the list."""
        entries = await self.get_all_entries_ids(data_id, group_id, site_id)
        return locate_by_entry(entries, entry_id)

    async def get_page_info_by_page(
        self,
        data_id: int,
        page: Any,
        group_id: int = 0,
        site_id: Optional[str] = None,
    ) -> Optional[PageInfo]:
        """Page info of the entry at a page number, None if out of range."""
        entries = await self.get_all_entries_ids(data_id, group_id, site_id)
        return locate_by_page(entries, page)

    # Presentation

    @staticmethod
    def prefix_css(css: str, prefix: str) -> str:
        """Add a prefix to all rules in a CSS string."""
        if not css:
            return ""
        # Remove comments first.
        css = re.sub(r"/\*[\s\S]*?\*/|([^:]|^)//.*$", lambda m: m.group(1) or "", css, flags=re.MULTILINE)
        return re.sub(r"([\s\S]*?)({[\s\S]*?}|,)", lambda m: f"{prefix} {m.group(1)} {m.group(2)}", css)
