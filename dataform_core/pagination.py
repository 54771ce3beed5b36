"""
Entry pagination index.

Computes neighbour/page metadata for one entry of an ordered list of entry
ids. A miss (unknown entry, page out of range) returns None.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union


EntryId = Union[int, str]


@dataclass
class PageInfo:
    """Position of an entry within the ordered entry list."""
    previous_id: Union[EntryId, bool]
    next_id: Union[EntryId, bool]
    entry_id: EntryId
    page: Any
    num_entries: int

    @property
    def has_previous(self) -> bool:
        return self.previous_id is not False

    @property
    def has_next(self) -> bool:
        return self.next_id is not False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previousId": self.previous_id,
            "nextId": self.next_id,
            "entryId": self.entry_id,
            "page": self.page,
            "numEntries": self.num_entries,
        }


def _same_id(a: EntryId, b: EntryId) -> bool:
    return a == b or str(a) == str(b)


def _page_info(entries: Sequence[EntryId], index: int, page: Any) -> PageInfo:
    return PageInfo(
        previous_id=entries[index - 1] if index > 0 else False,
        next_id=entries[index + 1] if index + 1 < len(entries) else False,
        entry_id=entries[index],
        page=page,
        num_entries=len(entries),
    )


def locate_by_entry(entries: Sequence[EntryId], entry_id: EntryId) -> Optional[PageInfo]:
    """Page info of the first position holding entry_id, or None."""
    for index, candidate in enumerate(entries):
        if _same_id(candidate, entry_id):
            info = _page_info(entries, index, index + 1)
            info.entry_id = entry_id
            return info
    return None


def locate_by_page(entries: Sequence[EntryId], page: Any) -> Optional[PageInfo]:
    """Page info of the entry shown at a 1-based page number, or None."""
    try:
        index = int(page) - 1
    except (TypeError, ValueError):
        return None
    if index < 0 or index >= len(entries) or entries[index] is None:
        return None
    return _page_info(entries, index, page)
