"""Terminal user interface of the disk explorer."""

from __future__ import annotations

import curses
import json
import textwrap
from pathlib import Path
from typing import Any, Optional, Sequence

from idz.app import App, AppView
from idz.disk import IdentityDisk
from idz.errors import DiskError
from idz.models import Chunk, SearchResult
from idz.signature import parse_dimension, parse_dtype

_Rect = tuple[int, int, int, int]

_INT_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_ENTER: "enter",
    curses.KEY_BACKSPACE: "backspace",
}

_CHAR_KEYS = {
    "\n": "enter",
    "\r": "enter",
    "\x1b": "esc",
    "\x7f": "backspace",
    "\b": "backspace",
}


def _preview(content: str, limit: int) -> str:
    if len(content.encode("utf-8")) > limit:
        return content[: limit - 3] + "..."
    return content


def chunk_list_line(chunk: Chunk) -> str:
    """Return the line that stands for a chunk in the chunk list."""
    return f"ID: {chunk.chunk_id[:8]}... | {_preview(chunk.content, 80)}"


def search_result_line(result: SearchResult) -> str:
    """Return the line that stands for a search result."""
    chunk = result.chunk
    return (
        f"ID: {chunk.chunk_id[:8]}... | Score: {result.distance:.4f} | "
        f"{_preview(chunk.content, 60)}"
    )


def overview_lines(app: App) -> tuple[list[str], list[str]]:
    """Return the disk information and the active index information lines."""
    try:
        spec_version = app.disk.get_spec_version()
    except DiskError as exc:
        spec_version = f"Error: {exc}"

    count = len(app.all_chunks)
    total_chars = sum(len(c.content.encode("utf-8")) for c in app.all_chunks)
    avg_chars = total_chars // count if count else 0

    file_info = [
        f"File: {app.file_path}",
        f"Spec Version: {spec_version}",
        f"Model Signature: {app.model_signature}",
        f"Total Chunks: {count}",
        f"Average chars per chunk: {avg_chars}",
    ]

    dim = parse_dimension(app.model_signature, 0)
    try:
        index_desc = app.disk.get_index_type_description()
    except DiskError as exc:
        index_desc = f"Error: {exc}"
    embed_info = [
        f"Parsed Dimension: {'N/A' if dim == 0 else dim}",
        f"Parsed Data Type: {parse_dtype(app.model_signature)}",
        f"Active Index Type: {index_desc}",
    ]
    return file_info, embed_info


def detail_text(app: App) -> list[tuple[str, str]]:
    """Return the (title, body) sections of the chunk detail view."""
    if app.selected_chunk_id is None:
        return [("Chunk Detail", "No chunk selected.")]
    chunk = app.selected_chunk()
    if chunk is None:
        return [("Error", f"Could not find chunk with ID: {app.selected_chunk_id}")]
    try:
        meta_text = json.dumps(chunk.metadata, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        meta_text = "Invalid JSON"
    return [
        (f"Chunk {app.selected_chunk_id} - Text", chunk.content),
        ("Metadata", meta_text),
    ]


def _put(screen: Any, y: int, x: int, text: str, width: int, attr: int = 0) -> None:
    if width <= 0:
        return
    try:
        screen.addnstr(y, x, text, width, attr)
    except curses.error:
        pass


def _wrap(text: str, width: int) -> list[str]:
    if width <= 0:
        return []
    lines: list[str] = []
    for paragraph in text.split("\n"):
        lines.extend(textwrap.wrap(paragraph, width) or [""])
    return lines


def _draw_block(
    screen: Any,
    rect: _Rect,
    title: str,
    lines: Sequence[str],
    attr: int = 0,
    highlight: Optional[int] = None,
) -> None:
    top, left, height, width = rect
    if height < 2 or width < 2:
        return
    edge = "+" + "-" * (width - 2) + "+"
    _put(screen, top, left, edge, width, attr)
    _put(screen, top + 1 - 1, left + 1, title, width - 2, attr)
    for row in range(1, height - 1):
        _put(screen, top + row, left, "|", 1, attr)
        _put(screen, top + row, left + width - 1, "|", 1, attr)
    _put(screen, top + height - 1, left, edge, width, attr)

    inner_height = height - 2
    inner_width = width - 2
    start = 0
    if highlight is not None and highlight >= inner_height:
        start = highlight - inner_height + 1
    for row, position in enumerate(range(start, min(len(lines), start + inner_height))):
        text = lines[position]
        line_attr = 0
        if highlight is not None:
            selected = position == highlight
            text = ("> " if selected else "  ") + text
            line_attr = curses.A_REVERSE if selected else 0
        _put(screen, top + 1 + row, left + 1, text, inner_width, line_attr)


def _draw_paragraph(screen: Any, rect: _Rect, title: str, text: str, attr: int = 0) -> None:
    _draw_block(screen, rect, title, _wrap(text, rect[3] - 2), attr)


def _split(rect: _Rect, first_height: int) -> tuple[_Rect, _Rect]:
    top, left, height, width = rect
    first_height = max(0, min(first_height, height))
    return (
        (top, left, first_height, width),
        (top + first_height, left, height - first_height, width),
    )


def _render_overview(screen: Any, rect: _Rect, app: App) -> None:
    file_info, embed_info = overview_lines(app)
    upper, lower = _split(rect, rect[2] // 2)
    _draw_paragraph(screen, upper, "Disk Information", "\n".join(file_info))
    _draw_paragraph(screen, lower, "Active Index Information", "\n".join(embed_info))


def _render_chunk_list(screen: Any, rect: _Rect, app: App) -> None:
    lines = [chunk_list_line(chunk) for chunk in app.all_chunks]
    title = f"Text Chunks (Total: {len(app.all_chunks)})"
    _draw_block(screen, rect, title, lines, highlight=app.list_selected)


def _render_chunk_detail(screen: Any, rect: _Rect, app: App) -> None:
    sections = detail_text(app)
    if len(sections) == 1:
        title, body = sections[0]
        _draw_paragraph(screen, rect, title, body)
        return
    upper, lower = _split(rect, rect[2] * 7 // 10)
    for area, (title, body) in zip((upper, lower), sections):
        _draw_paragraph(screen, area, title, body)


def _render_search(screen: Any, rect: _Rect, app: App) -> None:
    box, results_area = _split(rect, 3)
    if app.search_mode:
        query = f"Search: {app.search_query}|"
        attr = curses.A_BOLD
    else:
        query = f"Search: {app.search_query}"
        attr = 0
    _draw_block(screen, box, "Semantic Search", [query], attr)

    if app.search_results:
        lines = [search_result_line(result) for result in app.search_results]
        title = f"Search Results (Found: {len(app.search_results)})"
        _draw_block(screen, results_area, title, lines, highlight=app.search_selected)
    else:
        text = (
            "Press '/' to start searching. Press Enter to perform search."
            if not app.search_query
            else "No results found."
        )
        _draw_paragraph(screen, results_area, "Search Results", text)


_RENDERERS = {
    AppView.OVERVIEW: _render_overview,
    AppView.CHUNK_LIST: _render_chunk_list,
    AppView.CHUNK_DETAIL: _render_chunk_detail,
    AppView.SEARCH: _render_search,
}


def _draw(screen: Any, app: App) -> None:
    height, width = screen.getmaxyx()
    screen.erase()
    inner_width = width - 2
    header = (1, 1, 3, inner_width)
    footer = (height - 4, 1, 3, inner_width)
    main = (4, 1, max(0, height - 8), inner_width)
    _draw_paragraph(
        screen, header, "Identity Disk Explorer", f"IDZ Explorer - {app.file_path}"
    )
    _draw_paragraph(screen, footer, "Controls", app.footer_text())
    _RENDERERS[app.current_view](screen, main, app)
    screen.refresh()


def _key_name(key: Any) -> Optional[str]:
    if isinstance(key, int):
        return _INT_KEYS.get(key)
    if key in _CHAR_KEYS:
        return _CHAR_KEYS[key]
    if len(key) == 1 and key.isprintable():
        return key
    return None


def run_app(screen: Any, app: App) -> None:
    """Draw the explorer and handle key presses until the user quits."""
    while True:
        _draw(screen, app)
        name = _key_name(screen.get_wch())
        if name is None:
            continue
        if not app.handle_key(name):
            return


def _session(screen: Any, app: App) -> None:
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    screen.keypad(True)
    run_app(screen, app)


def run_tui(file_path: Path | str, model_signature: str) -> None:
    """Open a disk and explore it in the terminal."""
    path = Path(file_path)
    print(f'Opening .idz file: "{path}" with model_signature: {model_signature}')
    with IdentityDisk.open(path, model_signature) as disk:
        app = App(disk, path, model_signature)
        try:
            curses.wrapper(_session, app)
        except (curses.error, OSError) as exc:
            print(repr(exc))