"""Tests for the web service client against a local aiohttp server."""

import pytest
from aiohttp import web
from aiohttp import test_utils

from dataform_core.config import Config
from dataform_core.exceptions import EntriesFetchError, UploadError, WSError
from dataform_core.ws_client import MoodleWSClient, UploadFile, flatten_params


ENTRY_IDS = [31, 32, 33, 34, 35]


def _make_app(received):
    async def rest(request):
        data = await request.post()
        received.append(dict(data))
        if data["wstoken"] != "secret":
            return web.json_response({"exception": "moodle_exception", "errorcode": "invalidtoken", "message": "Invalid token"})
        if data["wsfunction"] == "mod_data_get_entries":
            page = int(data["page"])
            perpage = int(data["perpage"])
            chunk = ENTRY_IDS[page * perpage:(page + 1) * perpage]
            return web.json_response({"entries": [{"id": i} for i in chunk], "totalcount": len(ENTRY_IDS)})
        return web.json_response({"echo": data["wsfunction"]})

    async def upload(request):
        data = await request.post()
        received.append({"upload": {k: getattr(v, "filename", v) for k, v in data.items()}})
        if data.get("token") != "secret":
            return web.json_response({"error": "Invalid token", "errorcode": "invalidtoken"})
        return web.json_response([{"itemid": 777, "filename": data["file_1"].filename}])

    async def stored_file(request):
        return web.Response(body=b"stored")

    app = web.Application()
    app.router.add_post("/webservice/rest/server.php", rest)
    app.router.add_post("/webservice/upload.php", upload)
    app.router.add_get("/pluginfile.php/1/old.txt", stored_file)
    return app


def _client(server, token="secret"):
    cfg = Config(site_url=str(server.make_url("/")), ws_token=token, entries_per_page=2)
    return MoodleWSClient(cfg=cfg)


class TestFlattenParams:

    def test_nested(self):
        params = {"databaseid": 3, "data": [{"fieldid": 1, "value": '"x"'}], "flag": True, "skip": None}
        assert flatten_params(params) == {
            "databaseid": "3",
            "data[0][fieldid]": "1",
            "data[0][value]": '"x"',
            "flag": "1",
        }


class TestRestCalls:

    @pytest.mark.asyncio
    async def test_fetch_all_entries_pages_through(self):
        received = []
        async with test_utils.TestServer(_make_app(received)) as server:
            entries = await _client(server).fetch_all_entries(5, 0)

        assert [e["id"] for e in entries] == ENTRY_IDS
        assert [r["page"] for r in received] == ["0", "1", "2"]
        assert received[0]["databaseid"] == "5"
        assert received[0]["moodlewsrestformat"] == "json"

    @pytest.mark.asyncio
    async def test_ws_exception(self):
        async with test_utils.TestServer(_make_app([])) as server:
            with pytest.raises(WSError) as excinfo:
                await _client(server, token="wrong").call("core_webservice_get_site_info")

        assert excinfo.value.errorcode == "invalidtoken"

    @pytest.mark.asyncio
    async def test_fetch_error(self):
        async with test_utils.TestServer(_make_app([])) as server:
            with pytest.raises(EntriesFetchError):
                await _client(server, token="wrong").fetch_all_entries(5)


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_returns_item_id(self):
        received = []
        async with test_utils.TestServer(_make_app(received)) as server:
            item_id = await _client(server).upload_or_reupload_files(
                [UploadFile(filename="a.txt", content=b"hello")], "mod_data", 0
            )

        assert item_id == 777
        sent = received[0]["upload"]
        assert sent["filearea"] == "draft"
        assert sent["itemid"] == "0"
        assert sent["file_1"] == "a.txt"

    @pytest.mark.asyncio
    async def test_reupload_stored_file(self):
        received = []
        async with test_utils.TestServer(_make_app(received)) as server:
            client = _client(server)
            stored = {"filename": "old.txt", "fileurl": str(server.make_url("/pluginfile.php/1/old.txt"))}
            item_id = await client.upload_or_reupload_files([stored], "mod_data", 12)

        assert item_id == 777
        assert received[0]["upload"]["file_1"] == "old.txt"
        assert received[0]["upload"]["itemid"] == "12"

    @pytest.mark.asyncio
    async def test_upload_rejected(self):
        async with test_utils.TestServer(_make_app([])) as server:
            with pytest.raises(UploadError):
                await _client(server, token="wrong").upload_or_reupload_files(
                    [UploadFile(filename="a.txt", content=b"x")], "mod_data"
                )

    @pytest.mark.asyncio
    async def test_nothing_to_upload(self):
        client = MoodleWSClient(site_url="http://localhost", token="t")
        assert await client.upload_or_reupload_files([], "mod_data", 5) == 5

    def test_upload_file_without_content(self):
        with pytest.raises(UploadError):
            UploadFile(filename="missing").read()
