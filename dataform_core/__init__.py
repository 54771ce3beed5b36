"""
dataform_core package: entry form helpers for database activities

Usage:
    from dataform_core import DataHelper, FieldDescriptor, read_form

    fields = [FieldDescriptor(id=1, name="Title", type="text")]
    html = display_edit_fields(template, fields)

    form = await read_form(page, "#entry-form")
    edit = await DataHelper(uploader=client).get_edit_data_from_form(form, fields, data_id, contents)
"""
from .config import Config, config
from .exceptions import DataFormError, RegistryError, WSError, UploadError, EntriesFetchError
from .template import (
    FieldDescriptor,
    SEARCH_OTHER,
    display_search_fields,
    display_edit_fields,
    substitute,
)
from .form_snapshot import Form, FormControl, get_form_data, read_form
from .fields import FieldPlugin, FieldsDelegate, default_delegate, register
from .pagination import PageInfo, locate_by_entry, locate_by_page
from .ws_client import EntriesSource, FileUploader, MoodleWSClient, UploadFile
from .helper import DataHelper

__all__ = [
    "Config",
    "config",
    "DataFormError",
    "RegistryError",
    "WSError",
    "UploadError",
    "EntriesFetchError",
    "FieldDescriptor",
    "SEARCH_OTHER",
    "display_search_fields",
    "display_edit_fields",
    "substitute",
    "Form",
    "FormControl",
    "get_form_data",
    "read_form",
    "FieldPlugin",
    "FieldsDelegate",
    "default_delegate",
    "register",
    "PageInfo",
    "locate_by_entry",
    "locate_by_page",
    "EntriesSource",
    "FileUploader",
    "MoodleWSClient",
    "UploadFile",
    "DataHelper",
]
