"""Tests for the field plugin registry and built-in field types."""

import asyncio

import pytest

from dataform_core.exceptions import RegistryError
from dataform_core.fields import FieldPlugin, FieldsDelegate, default_delegate, register
from dataform_core.fields.builtin import FileField, MultipleChoiceField
from dataform_core.template import FieldDescriptor
from dataform_core.ws_client import UploadFile


class EchoField(FieldPlugin):
    def search_data(self, field, snapshot):
        return [{"name": field.name, "value": snapshot.get(field.name)}]

    async def edit_data(self, field, snapshot, original=None):
        await asyncio.sleep(0)
        return [{"name": field.name, "value": snapshot.get(field.name)}]

    def has_changed(self, field, snapshot, original=None):
        return snapshot.get(field.name) != original


class TestFieldsDelegate:
    """Registry dispatch"""

    def test_register_and_lookup(self):
        delegate = FieldsDelegate()
        plugin = delegate.register_handler("echo", EchoField())
        assert delegate.get_handler("echo") is plugin
        assert delegate.has_handler("echo")
        assert delegate.list_types() == ["echo"]

    def test_rejects_non_plugin(self):
        delegate = FieldsDelegate()
        with pytest.raises(RegistryError):
            delegate.register_handler("echo", object())

    def test_unregister(self):
        delegate = FieldsDelegate()
        delegate.register_handler("echo", EchoField())
        assert delegate.unregister("echo") is True
        assert delegate.unregister("echo") is False

    def test_decorator_registers_types(self):
        delegate = FieldsDelegate()

        @register("a", "b", delegate=delegate)
        class Both(FieldPlugin):
            pass

        assert isinstance(delegate.get_handler("a"), Both)
        assert delegate.get_handler("a") is delegate.get_handler("b")

    def test_decorator_requires_type(self):
        with pytest.raises(RegistryError):
            @register(delegate=FieldsDelegate())
            class NoType(FieldPlugin):
                pass

    def test_missing_handler_contributes_nothing(self):
        delegate = FieldsDelegate()
        field = FieldDescriptor(id=1, name="x", type="unknown")
        assert delegate.get_field_search_data(field, {"x": "1"}) is None

    @pytest.mark.asyncio
    async def test_missing_handler_async_defaults(self):
        delegate = FieldsDelegate()
        field = FieldDescriptor(id=1, name="x", type="unknown")
        assert await delegate.get_field_edit_data(field, {}) is None
        assert await delegate.get_field_edit_files(field, {}) == []
        assert await delegate.has_field_data_changed(field, {}) is False

    @pytest.mark.asyncio
    async def test_sync_and_async_hooks(self):
        delegate = FieldsDelegate()
        delegate.register_handler("echo", EchoField())
        field = FieldDescriptor(id=1, name="x", type="echo")

        assert await delegate.get_field_edit_data(field, {"x": "v"}) == [{"name": "x", "value": "v"}]
        assert await delegate.has_field_data_changed(field, {"x": "v"}, "v") is False
        assert await delegate.has_field_data_changed(field, {"x": "w"}, "v") is True


class TestBuiltinFields:
    """Standard field types registered in the default delegate"""

    def test_default_types_registered(self):
        for field_type in ("text", "textarea", "url", "number", "menu", "radiobutton",
                           "checkbox", "multimenu", "file", "picture"):
            assert default_delegate.has_handler(field_type)

    def test_text_search(self):
        field = FieldDescriptor(id=4, name="Title", type="text")
        assert default_delegate.get_field_search_data(field, {"f_4": "abc"}) == [{"name": "f_4", "value": "abc"}]
        assert default_delegate.get_field_search_data(field, {"f_4": ""}) is None

    @pytest.mark.asyncio
    async def test_text_changed(self):
        field = FieldDescriptor(id=4, name="Title", type="text")
        assert await default_delegate.has_field_data_changed(field, {"f_4": "abc"}, {"content": "abc"}) is False
        assert await default_delegate.has_field_data_changed(field, {"f_4": "abd"}, {"content": "abc"}) is True
        assert await default_delegate.has_field_data_changed(field, {}, None) is False

    def test_checkbox_search(self):
        field = FieldDescriptor(id=5, name="Tags", type="checkbox")
        snapshot = {"f_5": {"red": True, "blue": False, "green": True}, "f_5_allreq": {"1": True}}
        assert default_delegate.get_field_search_data(field, snapshot) == [
            {"name": "f_5", "value": ["red", "green"]},
            {"name": "f_5_allreq", "value": True},
        ]

    @pytest.mark.asyncio
    async def test_checkbox_changed(self):
        field = FieldDescriptor(id=5, name="Tags", type="checkbox")
        snapshot = {"f_5": {"red": True, "blue": False, "green": True}}
        assert await default_delegate.has_field_data_changed(field, snapshot, {"content": "green##red"}) is False
        assert await default_delegate.has_field_data_changed(field, snapshot, {"content": "red"}) is True

    def test_selected_options(self):
        assert MultipleChoiceField.selected({"a": True, "b": False}) == ["a"]
        assert MultipleChoiceField.selected("a") == ["a"]
        assert MultipleChoiceField.selected(None) == []

    @pytest.mark.asyncio
    async def test_file_field_edit(self):
        plugin = FileField()
        field = FieldDescriptor(id=9, name="Photo", type="picture")
        upload = UploadFile(filename="a.png", content=b"png")
        plugin.set_files(9, [upload])

        items = plugin.edit_data(field, {"f_9_alttext": "Alt"}, None)

        assert items[0]["files"] == [upload]
        assert items[0]["subfield"] == "file"
        assert items[1] == {"fieldid": 9, "name": "f_9", "value": "Alt", "subfield": "alttext"}
        assert plugin.edit_files(field, {}, None) == [upload]
        assert plugin.has_changed(field, {"f_9_alttext": "Alt"}, {"content1": "Alt", "files": [{"filename": "a.png"}]}) is False
        assert plugin.has_changed(field, {"f_9_alttext": "Alt"}, {"content1": "Alt", "files": []}) is True
