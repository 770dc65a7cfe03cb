"""Tests for the command palette model."""

from inboxdash.tui.command_definitions import build_default_registry
from inboxdash.tui.palette import MAX_SUGGESTIONS, CommandPalette, PaletteOutcome
from tests.fakes import event


def _palette():
    palette = CommandPalette(build_default_registry())
    palette.open()
    return palette


def _type(palette, text):
    for ch in text:
        assert palette.handle_key(event(ch)) is PaletteOutcome.KEEP_OPEN


def test_open_lists_suggestions_capped():
    palette = _palette()
    assert len(palette.state.suggestions) == MAX_SUGGESTIONS
    assert palette.state.selected == 0


def test_typing_filters_live():
    palette = _palette()
    _type(palette, "web")
    names = [c.name for c in palette.state.suggestions]
    assert names[:2] == ["webhook", "webhooks"]


def test_enter_commits_typed_text():
    palette = _palette()
    _type(palette, "m")
    assert palette.handle_key(event("enter")) is PaletteOutcome.COMMIT
    assert palette.committed == "m"


def test_enter_on_empty_commits_highlighted():
    palette = _palette()
    palette.handle_key(event("down"))
    expected = palette.highlighted().name
    assert palette.handle_key(event("enter")) is PaletteOutcome.COMMIT
    assert palette.committed == expected


def test_selection_wraps():
    palette = _palette()
    palette.handle_key(event("up"))
    assert palette.state.selected == len(palette.state.suggestions) - 1
    palette.handle_key(event("ctrl+n"))
    assert palette.state.selected == 0


def test_escape_cancels_without_commit():
    palette = _palette()
    _type(palette, "star")
    assert palette.handle_key(event("escape")) is PaletteOutcome.CANCEL
    assert palette.committed == ""


def test_backspace_on_empty_cancels():
    palette = _palette()
    assert palette.handle_key(event("backspace")) is PaletteOutcome.CANCEL


def test_backspace_edits_text():
    palette = _palette()
    _type(palette, "ms")
    palette.handle_key(event("backspace"))
    assert palette.state.text == "m"


def test_tab_enters_subcommand_mode():
    palette = _palette()
    _type(palette, "webhook")
    assert palette.highlighted().name == "webhook"
    palette.handle_key(event("tab"))
    assert palette.state.text == "webhook "
    assert palette.state.parent_cmd == "webhook"
    names = [c.name for c in palette.state.suggestions]
    assert "webhook test" in names


def test_tab_completes_plain_command():
    palette = _palette()
    _type(palette, "refr")
    palette.handle_key(event("tab"))
    assert palette.state.text == "refresh"


def test_subcommand_query_filters_children():
    palette = _palette()
    palette.set_text("rsvp ma")
    assert [c.name for c in palette.state.suggestions] == ["rsvp maybe"]


def test_ctrl_u_clears():
    palette = _palette()
    _type(palette, "abc")
    palette.handle_key(event("ctrl+u"))
    assert palette.state.text == ""


def test_open_in_a_view_ranks_its_commands_first():
    palette = CommandPalette(build_default_registry())
    palette.open("webhooks")
    assert palette.state.suggestions[0].name == "webhook"

    palette.open("messages")
    _type(palette, "re")
    assert [c.name for c in palette.state.suggestions][:3] == ["read", "reply", "replyall"]

    palette.open()
    assert palette.context == ""
    assert [c.name for c in palette.state.suggestions] == sorted(
        c.name for c in palette.state.suggestions)
