import pytest

from idz.app import App, AppView
from idz.disk import IdentityDisk
from idz.errors import InvalidDataError
from idz.signature import DemoRandom

SIGNATURE = "test-model-4_fp32"


def _make_disk(tmp_path, contents, signature=SIGNATURE):
    path = tmp_path / "disk.idz"
    disk = IdentityDisk.create(path, signature)
    rng = DemoRandom(7)
    for text in contents:
        # A freshly created disk has no index loaded, so the write succeeds
        # and the in-memory update is refused.
        with pytest.raises(InvalidDataError):
            disk.add_chunk(text, rng.vector(4), {"text": text})
    disk.close()
    return path, IdentityDisk.open(path, signature)


@pytest.fixture
def app(tmp_path):
    path, disk = _make_disk(tmp_path, ["alpha", "beta", "gamma"])
    explorer = App(disk, path, SIGNATURE)
    yield explorer
    disk.close()


def test_initial_state(app):
    assert app.current_view is AppView.OVERVIEW
    assert len(app.all_chunks) == 3
    assert app.list_selected == 0
    assert sorted(c.content for c in app.all_chunks) == ["alpha", "beta", "gamma"]


def test_empty_disk_sets_status(tmp_path):
    path, disk = _make_disk(tmp_path, [])
    explorer = App(disk, path, SIGNATURE)
    assert explorer.all_chunks == []
    assert explorer.list_selected is None
    assert explorer.status_message == "No chunks found in the disk."
    explorer.next_chunk()
    explorer.previous_chunk()
    assert explorer.list_selected is None
    disk.close()


def test_chunk_navigation_wraps(app):
    app.next_chunk()
    app.next_chunk()
    assert app.list_selected == 2
    app.next_chunk()
    assert app.list_selected == 0
    app.previous_chunk()
    assert app.list_selected == 2


def test_quit_key(app):
    assert app.handle_key("q") is False
    assert app.handle_key("x") is True


def test_view_switch_keys(app):
    app.handle_key("2")
    assert app.current_view is AppView.CHUNK_LIST
    app.handle_key("3")
    assert app.current_view is AppView.SEARCH
    app.handle_key("1")
    assert app.current_view is AppView.OVERVIEW


def test_open_chunk_detail_and_back(app):
    app.handle_key("2")
    app.handle_key("j")
    app.handle_key("enter")
    assert app.current_view is AppView.CHUNK_DETAIL
    assert app.selected_chunk() == app.all_chunks[1]
    app.handle_key("esc")
    assert app.current_view is AppView.CHUNK_LIST


def test_selected_chunk_none_without_selection(app):
    assert app.selected_chunk() is None
    app.selected_chunk_id = "missing"
    assert app.selected_chunk() is None


def test_typing_a_search(app):
    app.handle_key("3")
    app.handle_key("/")
    assert app.search_mode
    for key in "abx":
        app.handle_key(key)
    app.handle_key("backspace")
    assert app.search_query == "ab"
    app.handle_key("enter")
    assert not app.search_mode
    assert len(app.search_results) == 3
    assert app.search_selected == 0
    assert app.status_message == "Found 3 results for 'ab'"
    distances = [r.distance for r in app.search_results]
    assert distances == sorted(distances)


def test_search_result_navigation_and_detail(app):
    app.search_query = "query"
    app.perform_search()
    app.current_view = AppView.SEARCH
    app.handle_key("k")
    assert app.search_selected == 2
    app.handle_key("down")
    assert app.search_selected == 0
    app.handle_key("enter")
    assert app.current_view is AppView.CHUNK_DETAIL
    assert app.selected_chunk_id == app.search_results[0].chunk.chunk_id


def test_escape_cancels_search(app):
    app.handle_key("3")
    app.handle_key("/")
    app.handle_key("z")
    app.handle_key("esc")
    assert not app.search_mode
    assert app.search_query == ""


def test_digit_in_search_mode_switches_view_and_types(app):
    app.handle_key("3")
    app.handle_key("/")
    app.handle_key("1")
    assert app.current_view is AppView.OVERVIEW
    assert app.search_query == "1"
    assert app.search_mode


def test_empty_query_clears_results(app):
    app.search_query = "q"
    app.perform_search()
    assert app.search_results
    app.search_query = ""
    app.perform_search()
    assert app.search_results == []
    assert app.search_selected is None


def test_search_without_index_finds_nothing(tmp_path):
    signature = "test-model-4_int8"
    path, disk = _make_disk(tmp_path, ["one"], signature)
    explorer = App(disk, path, signature)
    explorer.search_query = "x"
    explorer.perform_search()
    assert explorer.search_results == []
    assert explorer.search_selected is None
    assert explorer.status_message == "Found 0 results for 'x'"
    disk.close()


def test_refresh_after_close_reports_error(app):
    app.disk.close()
    app.refresh_chunks()
    assert app.all_chunks == []
    assert app.list_selected is None
    assert app.status_message.startswith("Error loading chunks: ")


def test_footer_text(app):
    assert app.footer_text() == "1: Overview | 2: Chunks | 3: Search | q: Quit"
    app.current_view = AppView.CHUNK_DETAIL
    assert app.footer_text() == "Esc: Back | 1: Overview | 2: Chunks | q: Quit"
    app.search_mode = True
    assert app.footer_text() == "Enter: Search | Esc: Cancel"