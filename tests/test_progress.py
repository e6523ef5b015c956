"""
Tests for rotating wait messages.
"""

import threading

import pytest

from prd_mockups.utils.progress import run_with_messages


def test_messages_rotate_until_call_returns():
    shown = []
    release = threading.Event()

    def show(message):
        shown.append(message)
        if len(shown) == 4:
            release.set()

    def slow(value, suffix=""):
        release.wait(timeout=5)
        return value + suffix

    result = run_with_messages(slow, ["one", "two", "three"], show, 0.01, "done", suffix="!")

    assert result == "done!"
    assert shown[:4] == ["one", "two", "three", "one"]


def test_errors_propagate():
    def broken():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        run_with_messages(broken, ["wait"], lambda message: None, 0.01)
