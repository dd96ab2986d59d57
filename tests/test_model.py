import re

from treehouse.config import HealthEntry, ServiceConfig
from treehouse.service import Status
from treehouse.tui.model import (
    SIDEBAR_WIDTH,
    KeyMsg,
    LogMsg,
    Model,
    StatusMsg,
    Viewport,
    WindowSizeMsg,
    style_status,
)

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def plain(text):
    return ANSI.sub("", text)


def services(*names):
    return [ServiceConfig(name=name) for name in names]


def test_style_status_contains_status():
    for status in Status:
        assert status.value in plain(style_status(status))
        assert style_status(status.value) == style_status(status)


def test_style_status_unknown_text_kept():
    assert plain(style_status("weird")) == "weird"


def test_new_model_with_focus():
    model = Model(services("a", "b", "c"), None, "b", "")
    assert model.svc_focus == "b"
    assert model.selected == 0


def test_update_focus_filtering():
    model = Model(services("a", "b"), None, "a", "")
    model.update(LogMsg(service="b", line="ignored"))
    assert len(model.logs["b"]) == 0
    model.update(LogMsg(service="a", line="ok"))
    assert len(model.logs["a"]) == 1


def test_update_mute_filtering():
    model = Model(services("a", "b"), None, "", "b")
    model.update(LogMsg(service="b", line="ignored"))
    assert len(model.logs["b"]) == 0
    initial = model.statuses["b"]
    model.update(StatusMsg(service="b", status=Status.RUNNING))
    assert model.statuses["b"] == initial


def test_new_model_defaults():
    svcs = services("svc1", "svc2")
    model = Model(svcs, {"svc1": HealthEntry(url="u", codes=[200])}, "", "")
    assert model.services == svcs
    for svc in svcs:
        assert model.statuses[svc.name] == Status.PENDING
        assert model.logs[svc.name] == []
    assert model.view_focus == "sidebar"


def test_update_log_msg_records_all():
    model = Model(services("s"))
    for _ in range(10):
        model.update(LogMsg(service="s", line="x"))
    assert len(model.logs["s"]) == 10


def test_log_for_selected_service_shown():
    model = Model(services("a", "b"))
    model.update(LogMsg(service="a", line="hello"))
    model.update(LogMsg(service="b", line="other"))
    assert "hello" in model.content.view()
    assert "other" not in model.content.view()


def test_update_status_msg():
    model = Model(services("s"))
    model.update(StatusMsg(service="s", status=Status.RUNNING))
    assert model.statuses["s"] == Status.RUNNING
    assert "s [Running]" in plain(model.sidebar_content())


def test_update_key_navigation_and_quit():
    model = Model(services("a", "b"))
    assert model.update(KeyMsg("j")) is False
    assert model.selected == 1
    model.update(KeyMsg("j"))
    assert model.selected == 1
    model.update(KeyMsg("k"))
    assert model.selected == 0
    model.update(KeyMsg("k"))
    assert model.selected == 0
    assert model.update(KeyMsg("q")) is True
    assert model.update(KeyMsg("ctrl+c")) is True


def test_navigation_loads_logs_of_selected():
    model = Model(services("a", "b"))
    model.update(LogMsg(service="b", line="from-b"))
    assert "from-b" not in model.content.view()
    model.update(KeyMsg("down"))
    assert "from-b" in model.content.view()


def test_sidebar_marks_selected():
    model = Model(services("a", "b"))
    lines = plain(model.sidebar_content()).splitlines()
    assert lines[0].startswith("> a [")
    assert lines[1].startswith("  b [")


def test_tab_switches_focus():
    model = Model(services("a", "b"))
    model.update(KeyMsg("tab"))
    assert model.view_focus == "content"
    model.update(KeyMsg("j"))
    assert model.selected == 0
    model.update(KeyMsg("tab"))
    assert model.view_focus == "sidebar"


def test_window_size():
    model = Model(services("a"))
    model.update(WindowSizeMsg(width=100, height=40))
    assert model.width == 100
    assert model.height == 40
    assert model.sidebar.width == SIDEBAR_WIDTH
    assert model.sidebar.height == model.content.height == 40 - 3
    assert model.content.width + SIDEBAR_WIDTH + 4 == 100


def test_view_has_help_and_names():
    model = Model(services("x"))
    view = plain(model.view())
    assert view
    assert "quit" in view
    assert "x [Pending]" in view


def test_viewport_goto_bottom():
    viewport = Viewport(width=10, height=2)
    viewport.set_content("one\ntwo\nthree\nfour")
    assert plain(viewport.view()).split("\n")[0].strip() == "one"
    viewport.goto_bottom()
    rows = [row.strip() for row in viewport.view().split("\n")]
    assert rows == ["three", "four"]


def test_viewport_horizontal_scroll_clamps():
    viewport = Viewport(width=3, height=1)
    viewport.set_content("abcdef")
    viewport.scroll_right(2)
    assert viewport.view() == "cde"
    viewport.scroll_right(100)
    assert viewport.view() == "def"
    viewport.scroll_left(100)
    assert viewport.x_offset == 0
    assert viewport.view() == "abc"


def test_viewport_shrinking_content_moves_to_bottom():
    viewport = Viewport(width=5, height=1)
    viewport.set_content("a\nb\nc\nd")
    viewport.goto_bottom()
    viewport.set_content("only")
    assert viewport.y_offset == 0
    assert viewport.view().strip() == "only"