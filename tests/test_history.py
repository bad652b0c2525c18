"""Tests for InteractionHistory."""

from __future__ import annotations

import pytest

from workbench.interactions.history import InteractionHistory


def filled(*entries: str, limit: int = 500) -> InteractionHistory:
    history = InteractionHistory(limit)
    for entry in entries:
        history.add(entry)
    return history


def test_new_history_has_nowhere_to_go() -> None:
    history = InteractionHistory()
    assert not history.has_previous()
    assert not history.has_next()
    with pytest.raises(IndexError):
        history.previous()
    with pytest.raises(IndexError):
        history.next()


def test_previous_walks_back_to_the_oldest() -> None:
    history = filled("x", "y", "z")

    assert [history.previous() for _ in range(3)] == ["z", "y", "x"]
    assert not history.has_previous()


def test_next_walks_forward_to_the_blank_line() -> None:
    history = filled("x", "y")
    history.previous()
    history.previous()

    assert history.next() == "y"
    assert history.next() == ""
    assert not history.has_next()


def test_add_moves_the_cursor_to_the_end() -> None:
    history = filled("x", "y")
    history.previous()
    history.previous()

    history.add("z")

    assert history.cursor == 3
    assert history.previous() == "z"


def test_move_end() -> None:
    history = filled("x", "y")
    history.previous()
    history.move_end()
    assert history.current() == ""
    assert history.cursor == len(history)


def test_limit_drops_the_oldest_entries() -> None:
    history = filled("a", "b", "c", "d", limit=2)
    assert history.entries() == ("c", "d")
    assert history.cursor == 2
