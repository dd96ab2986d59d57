import pytest

from treehouse.tui.keys import KeyBinding, default_keys


@pytest.mark.parametrize(
    "attr, key",
    [
        ("up", "up"), ("up", "k"),
        ("down", "down"), ("down", "j"),
        ("left", "left"), ("left", "h"),
        ("right", "right"), ("right", "l"),
        ("tab", "tab"),
        ("help", "?"),
        ("quit", "q"), ("quit", "esc"), ("quit", "ctrl+c"),
    ],
)
def test_bindings_match_their_keys(attr, key):
    keys = default_keys()
    binding = getattr(keys, attr)
    assert binding.matches(key) is True
    others = [b for b in keys.short_help() if b is not binding]
    assert not any(b.matches(key) for b in others)


def test_unbound_key_matches_nothing():
    keys = default_keys()
    assert not any(b.matches("x") for b in keys.short_help())


def test_custom_binding_matches():
    binding = KeyBinding(("a", "b"), "a", "do it")
    assert binding.matches("b") is True
    assert binding.matches("c") is False


def test_short_help_order():
    keys = default_keys()
    assert keys.short_help() == [
        keys.up, keys.down, keys.left, keys.right, keys.tab, keys.help, keys.quit,
    ]


def test_full_help_covers_short_help():
    keys = default_keys()
    flat = [binding for column in keys.full_help() for binding in column]
    assert flat == keys.short_help()
    assert [len(column) for column in keys.full_help()] == [4, 3]


def test_help_view_lists_every_description():
    keys = default_keys()
    view = keys.help_view()
    for binding in keys.short_help():
        assert f"{binding.help_key} {binding.help_desc}" in view
    assert "quit" in view
    assert view.index("move up") < view.index("quit")