"""Tests for the cut/paste move workflow."""

from __future__ import annotations

import asyncio

import pytest
from conftest import FakeBackend

from vaultlens.projection import BrowserNode
from vaultlens.session import (
    ClipboardCoordinator,
    ClipboardError,
    ClipboardItem,
    ClipboardState,
    VaultCoordinator,
)

CAT = ClipboardItem(
    name="cat.jpg", is_folder=False, path="/home/ana/photos/cat.jpg", hash="h-cat"
)
MUSIC = ClipboardItem(name="music", is_folder=True, folder_path="/home/ana/music")


def _clipboard(backend: FakeBackend) -> ClipboardCoordinator:
    coordinator = VaultCoordinator(backend)
    asyncio.run(coordinator.refresh_vault())
    backend.calls.clear()
    return ClipboardCoordinator(coordinator)


def test_second_cut_replaces_first(backend: FakeBackend) -> None:
    clipboard = _clipboard(backend)

    clipboard.cut(CAT)
    clipboard.cut(MUSIC)

    assert clipboard.item == MUSIC
    assert clipboard.state is ClipboardState.CUT


def test_begin_paste_requires_an_item(backend: FakeBackend) -> None:
    clipboard = _clipboard(backend)

    with pytest.raises(ClipboardError):
        clipboard.begin_paste()
    with pytest.raises(ClipboardError):
        asyncio.run(clipboard.confirm_paste("/dest"))


def test_blank_destination_sends_nothing(backend: FakeBackend) -> None:
    clipboard = _clipboard(backend)
    clipboard.cut(CAT)
    clipboard.begin_paste()

    assert asyncio.run(clipboard.confirm_paste("   ")) is None
    assert backend.calls == []
    assert clipboard.state is ClipboardState.PASTING
    assert clipboard.item == CAT


def test_file_paste_moves_by_hash_and_clears(backend: FakeBackend) -> None:
    clipboard = _clipboard(backend)
    clipboard.cut(CAT)
    clipboard.begin_paste()

    outcome = asyncio.run(clipboard.confirm_paste("/home/ana/archive"))

    assert outcome is not None and outcome.ok
    assert backend.called("move_file") == [("h-cat", "/home/ana/archive")]
    assert backend.called("move_folder") == []
    assert backend.called("list_records") == [()]
    assert clipboard.item is None
    assert clipboard.state is ClipboardState.EMPTY


def test_folder_paste_moves_by_path(backend: FakeBackend) -> None:
    clipboard = _clipboard(backend)
    clipboard.cut(MUSIC)

    outcome = asyncio.run(clipboard.confirm_paste("/srv"))

    assert outcome is not None and outcome.message == "Moved to: /srv/music"
    assert backend.called("move_folder") == [("/home/ana/music", "/srv")]


def test_folder_paste_falls_back_to_item_path(backend: FakeBackend) -> None:
    clipboard = _clipboard(backend)
    clipboard.cut(ClipboardItem(name="music", is_folder=True, path="/home/ana/music"))

    outcome = asyncio.run(clipboard.confirm_paste("/srv"))

    assert outcome is not None and outcome.ok
    assert backend.called("move_folder") == [("/home/ana/music", "/srv")]
    assert clipboard.state is ClipboardState.EMPTY


def test_failed_paste_keeps_item_for_retry(backend: FakeBackend) -> None:
    clipboard = _clipboard(backend)
    clipboard.cut(CAT)
    clipboard.begin_paste()
    backend.fail("move_file", "destination is read-only")

    outcome = asyncio.run(clipboard.confirm_paste("/readonly"))

    assert outcome is not None and not outcome.ok
    assert clipboard.item == CAT
    assert clipboard.state is ClipboardState.PASTING


def test_cancel_clears(backend: FakeBackend) -> None:
    clipboard = _clipboard(backend)
    clipboard.cut(CAT)
    clipboard.begin_paste()

    clipboard.cancel()

    assert clipboard.item is None
    assert clipboard.state is ClipboardState.EMPTY


def test_cut_accepts_browser_nodes() -> None:
    folder = BrowserNode(
        name="photos",
        is_folder=True,
        path="/home/ana/photos/cat.jpg",
        category="image",
        folder_path="/home/ana/photos",
    )
    leaf = BrowserNode(
        name="cat.jpg",
        is_folder=False,
        hash="h-cat",
        path="/home/ana/photos/cat.jpg",
        category="image",
    )

    assert ClipboardItem.from_node(folder).folder_path == "/home/ana/photos"
    assert ClipboardItem.from_node(folder).path == "/home/ana/photos/cat.jpg"
    assert ClipboardItem.from_node(leaf).hash == "h-cat"
    with pytest.raises(ClipboardError):
        ClipboardItem.from_node(leaf.model_copy(update={"hash": None}))
