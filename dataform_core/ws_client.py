"""
Web service collaborators of the database helper.

- EntriesSource: returns every entry of a database/group, already ordered
- FileUploader: uploads files to a draft area and returns its item id

MoodleWSClient implements both against a Moodle-style REST endpoint using
aiohttp. Failed requests are not retried.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import aiohttp

from .config import Config, config as default_config
from .diagnostics import get_logger
from .exceptions import EntriesFetchError, UploadError, WSError

logger = get_logger(__name__)


@dataclass
class UploadFile:
    """A local file waiting to be uploaded."""
    filename: str
    content: Optional[bytes] = None
    path: Optional[Union[str, Path]] = None
    mimetype: str = "application/octet-stream"

    def read(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise UploadError(f"No content for file {self.filename}")
        return Path(self.path).read_bytes()


class EntriesSource(ABC):
    """Provides the complete ordered entry list of a database."""

    @abstractmethod
    async def fetch_all_entries(self, data_id: int, group_id: int = 0, site_id: Optional[str] = None) -> List[Dict[str, Any]]:
        pass


class FileUploader(ABC):
    """Uploads files to a draft area."""

    @abstractmethod
    async def upload_or_reupload_files(
        self,
        files: Sequence[Any],
        component: str,
        item_id: int = 0,
        site_id: Optional[str] = None,
    ) -> int:
        pass


def flatten_params(params: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """
    Flatten nested params into the key[sub] form expected by the REST server.

    {"data": [{"fieldid": 1}]} -> {"data[0][fieldid]": "1"}
    """
    flat: Dict[str, str] = {}
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten_params(value, name))
        elif isinstance(value, (list, tuple)):
            flat.update(flatten_params(dict(enumerate(value)), name))
        elif isinstance(value, bool):
            flat[name] = "1" if value else "0"
        elif value is None:
            continue
        else:
            flat[name] = str(value)
    return flat


class MoodleWSClient(EntriesSource, FileUploader):
    """Async client for the REST web services of one site."""

    def __init__(self, site_url: str = None, token: str = None, cfg: Config = None):
        self.cfg = cfg or default_config
        self.site_url = (site_url or self.cfg.site_url).rstrip("/")
        self.token = token or self.cfg.ws_token
        self.timeout = self.cfg.http_timeout

    @property
    def rest_url(self) -> str:
        return f"{self.site_url}/webservice/rest/server.php"

    @property
    def upload_url(self) -> str:
        return f"{self.site_url}/webservice/upload.php"

    async def call(self, wsfunction: str, **params) -> Any:
        """Call a web service function and return its decoded response."""
        data = flatten_params(params)
        data.update({
            "wstoken": self.token or "",
            "wsfunction": wsfunction,
            "moodlewsrestformat": "json",
        })
        timeout_obj = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout_obj) as session:
            async with session.post(self.rest_url, data=data) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    raise WSError(f"HTTP {resp.status} calling {wsfunction}: {error_text}")
                result = await resp.json(content_type=None)

        if isinstance(result, dict) and result.get("exception"):
            raise WSError(result.get("message") or result["exception"], result.get("errorcode"))
        return result

    async def fetch_all_entries(self, data_id: int, group_id: int = 0, site_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Load every entry of the database, one WS page after another."""
        entries: List[Dict[str, Any]] = []
        page = 0
        perpage = self.cfg.entries_per_page
        while True:
            try:
                response = await self.call(
                    "mod_data_get_entries",
                    databaseid=data_id,
                    groupid=group_id,
                    returncontents=False,
                    page=page,
                    perpage=perpage,
                )
            except WSError as e:
                logger.error(f"Fetching entries of database {data_id} failed: {e}")
                raise EntriesFetchError(str(e), e.errorcode) from e

            batch = response.get("entries") or []
            entries.extend(batch)
            total = response.get("totalcount", len(entries))
            if not batch or len(batch) < perpage or len(entries) >= total:
                break
            page += 1

        logger.debug(f"Fetched {len(entries)} entries of database {data_id}, group {group_id}")
        return entries

    async def _download(self, session: aiohttp.ClientSession, file: Dict[str, Any]) -> bytes:
        async with session.get(file["fileurl"], params={"token": self.token or ""}) as resp:
            if resp.status != 200:
                raise UploadError(f"Cannot download {file.get('filename')}: HTTP {resp.status}")
            return await resp.read()

    async def upload_or_reupload_files(
        self,
        files: Sequence[Any],
        component: str,
        item_id: int = 0,
        site_id: Optional[str] = None,
    ) -> int:
        """
        Upload files to a draft area.

        Local files (UploadFile) are sent as they are. Files already stored
        on the site (dicts with a fileurl) are downloaded and sent again so
        they end up in the same draft area.

        Returns:
            Draft item id holding the files
        """
        if not files:
            return item_id

        timeout_obj = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout_obj) as session:
            form = aiohttp.FormData()
            form.add_field("token", self.token or "")
            form.add_field("filearea", "draft")
            form.add_field("itemid", str(item_id or 0))
            form.add_field("component", component)
            for index, file in enumerate(files, 1):
                if isinstance(file, dict) and file.get("fileurl"):
                    content = await self._download(session, file)
                    form.add_field(f"file_{index}", content, filename=file.get("filename") or f"file_{index}")
                elif isinstance(file, UploadFile):
                    form.add_field(f"file_{index}", file.read(), filename=file.filename, content_type=file.mimetype)
                else:
                    raise UploadError(f"Unsupported file object: {file!r}")

            async with session.post(self.upload_url, data=form) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    raise UploadError(f"Upload failed with HTTP {resp.status}: {error_text}")
                result = await resp.json(content_type=None)

        if isinstance(result, dict):
            raise UploadError(result.get("error") or "Upload rejected", result.get("errorcode"))
        if not result:
            raise UploadError("Upload returned no files")

        new_item_id = result[0].get("itemid")
        logger.debug(f"Uploaded {len(files)} file(s) for {component} to draft area {new_item_id}")
        return new_item_id
