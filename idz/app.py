"""State and key handling of the disk explorer."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Optional

from idz.disk import IdentityDisk
from idz.errors import DiskError
from idz.models import Chunk, SearchResult
from idz.signature import DemoRandom, parse_dimension

_DEFAULT_DIMENSION = 1536
_SEARCH_TOP_K = 10
_QUERY_SCALE = 0.1


class AppView(enum.Enum):
    """The screens the explorer can show."""

    OVERVIEW = "overview"
    CHUNK_LIST = "chunk_list"
    CHUNK_DETAIL = "chunk_detail"
    SEARCH = "search"


_FOOTERS = {
    AppView.OVERVIEW: "1: Overview | 2: Chunks | 3: Search | q: Quit",
    AppView.CHUNK_LIST: "↑↓/jk: Navigate | Enter: View | 1: Overview | 3: Search | q: Quit",
    AppView.CHUNK_DETAIL: "Esc: Back | 1: Overview | 2: Chunks | q: Quit",
    AppView.SEARCH: "/: Search | ↑↓/jk: Navigate Results | Enter: View Chunk | q: Quit",
}

_GLOBAL_VIEWS = {"1": AppView.OVERVIEW, "2": AppView.CHUNK_LIST, "3": AppView.SEARCH}


def _step(selected: Optional[int], count: int, forward: bool) -> Optional[int]:
    if count == 0:
        return selected
    if selected is None:
        return 0
    if forward:
        return 0 if selected >= count - 1 else selected + 1
    return count - 1 if selected == 0 else selected - 1


class App:
    """Explorer state over an open identity disk.

    Keys are one-character strings for characters, or the names
    "enter", "esc", "backspace", "up" and "down".
    """

    def __init__(
        self,
        disk: IdentityDisk,
        file_path: Path | str,
        model_signature: str,
        rng: Optional[DemoRandom] = None,
    ) -> None:
        self.disk = disk
        self.file_path = Path(file_path)
        self.model_signature = model_signature
        self.rng = rng if rng is not None else DemoRandom()
        self.all_chunks: list[Chunk] = []
        self.current_view = AppView.OVERVIEW
        self.list_selected: Optional[int] = None
        self.search_selected: Optional[int] = None
        self.selected_chunk_id: Optional[str] = None
        self.search_mode = False
        self.search_query = ""
        self.search_results: list[SearchResult] = []
        self.status_message = ""
        self.refresh_chunks()
        if self.all_chunks:
            self.list_selected = 0

    def refresh_chunks(self) -> None:
        """Reload all chunks from the disk, keeping the selection when valid."""
        try:
            chunks = self.disk.get_chunks()
        except DiskError as exc:
            self.all_chunks = []
            self.list_selected = None
            self.status_message = f"Error loading chunks: {exc}"
            return
        self.all_chunks = chunks
        if not chunks:
            self.list_selected = None
            self.status_message = "No chunks found in the disk."
        elif self.list_selected is None or self.list_selected >= len(chunks):
            self.list_selected = 0

    def next_chunk(self) -> None:
        """Move the chunk selection down, wrapping to the top."""
        self.list_selected = _step(self.list_selected, len(self.all_chunks), True)

    def previous_chunk(self) -> None:
        """Move the chunk selection up, wrapping to the bottom."""
        self.list_selected = _step(self.list_selected, len(self.all_chunks), False)

    def next_search_result(self) -> None:
        """Move the result selection down, wrapping to the top."""
        self.search_selected = _step(self.search_selected, len(self.search_results), True)

    def previous_search_result(self) -> None:
        """Move the result selection up, wrapping to the bottom."""
        self.search_selected = _step(self.search_selected, len(self.search_results), False)

    def perform_search(self) -> None:
        """Search the disk with a placeholder embedding for the current query."""
        if not self.search_query:
            self.search_results = []
            self.search_selected = None
            return
        dim = parse_dimension(self.model_signature, _DEFAULT_DIMENSION)
        query = self.rng.vector(dim, _QUERY_SCALE)
        try:
            self.search_results = self.disk.search(query, _SEARCH_TOP_K)
        except DiskError as exc:
            self.search_results = []
            self.search_selected = None
            self.status_message = f"Search error: {exc}"
            return
        self.search_selected = 0 if self.search_results else None
        self.status_message = (
            f"Found {len(self.search_results)} results for '{self.search_query}'"
        )

    def handle_key(self, key: str) -> bool:
        """Apply one key press; return False when the explorer should quit."""
        if key == "q":
            return False
        if key in _GLOBAL_VIEWS:
            self.current_view = _GLOBAL_VIEWS[key]

        if self.search_mode:
            self._handle_search_input(key)
        elif self.current_view is AppView.CHUNK_LIST:
            self._handle_chunk_list(key)
        elif self.current_view is AppView.CHUNK_DETAIL:
            if key == "esc":
                self.current_view = AppView.CHUNK_LIST
        elif self.current_view is AppView.SEARCH:
            self._handle_search_view(key)
        return True

    def _handle_search_input(self, key: str) -> None:
        if key == "enter":
            self.search_mode = False
            self.perform_search()
        elif len(key) == 1:
            self.search_query += key
        elif key == "backspace":
            self.search_query = self.search_query[:-1]
        elif key == "esc":
            self.search_mode = False
            self.search_query = ""

    def _handle_chunk_list(self, key: str) -> None:
        if key in ("down", "j"):
            self.next_chunk()
        elif key in ("up", "k"):
            self.previous_chunk()
        elif key == "enter" and self.list_selected is not None:
            if self.list_selected < len(self.all_chunks):
                self.selected_chunk_id = self.all_chunks[self.list_selected].chunk_id
                self.current_view = AppView.CHUNK_DETAIL

    def _handle_search_view(self, key: str) -> None:
        if key == "/":
            self.search_mode = True
            self.search_results = []
        elif key in ("down", "j"):
            self.next_search_result()
        elif key in ("up", "k"):
            self.previous_search_result()
        elif key == "enter" and self.search_selected is not None:
            if self.search_selected < len(self.search_results):
                result = self.search_results[self.search_selected]
                self.selected_chunk_id = result.chunk.chunk_id
                self.current_view = AppView.CHUNK_DETAIL

    def selected_chunk(self) -> Optional[Chunk]:
        """Return the loaded chunk whose id is selected, if any."""
        if self.selected_chunk_id is None:
            return None
        return next(
            (c for c in self.all_chunks if c.chunk_id == self.selected_chunk_id), None
        )

    def footer_text(self) -> str:
        """Return the help line for the current view."""
        if self.search_mode:
            return "Enter: Search | Esc: Cancel"
        return _FOOTERS[self.current_view]