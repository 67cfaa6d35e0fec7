"""Tests for the mutation coordinator and its cache consistency model."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest
from conftest import FakeBackend, make_pair

from vaultlens.projection import SmartDedupIndex
from vaultlens.records import SimilarityTriple
from vaultlens.session import BrowseState, VaultCoordinator, default_snapshot_name


def _loaded(backend: FakeBackend, *, confirm: bool = False) -> VaultCoordinator:
    coordinator = VaultCoordinator(backend, confirm=lambda _prompt: confirm)
    assert asyncio.run(coordinator.refresh_all())
    backend.calls.clear()
    return coordinator


def test_refresh_replaces_cache_wholesale(backend: FakeBackend) -> None:
    coordinator = VaultCoordinator(backend)
    assert coordinator.records == []
    assert coordinator.status == "Ready"

    asyncio.run(coordinator.refresh_all())
    assert len(coordinator.records) == 5
    assert len(coordinator.cache.snapshots) == 1
    assert coordinator.cache.records_fetched_at is not None

    backend.pairs = [make_pair("solo", "/only.txt")]
    asyncio.run(coordinator.refresh_vault())
    assert [record.path for record in coordinator.records] == ["/only.txt"]


def test_failed_refresh_keeps_previous_cache(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)
    before = coordinator.cache

    backend.fail("list_records", "database locked")
    assert asyncio.run(coordinator.refresh_vault()) is False

    assert coordinator.cache is before
    assert coordinator.status == "Error: database locked"


def test_successful_mutation_refetches_records(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)

    outcome = asyncio.run(coordinator.add_file("/home/ana/new.txt"))

    assert outcome.ok
    assert outcome.message == "Added new.txt."
    assert [name for name, _ in backend.calls] == ["add_file", "list_records"]
    assert any(record.path == "/home/ana/new.txt" for record in coordinator.records)
    assert coordinator.status == "Added new.txt."


def test_delete_to_bin_refetches_history_too(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)

    outcome = asyncio.run(coordinator.delete_to_bin("h-dog", "/home/ana/photos/dog.png"))

    assert outcome.message == "Moved to Recycle Bin."
    assert [name for name, _ in backend.calls] == [
        "delete_to_bin",
        "list_records",
        "list_deleted",
        "list_snapshots",
    ]
    assert all(record.hash != "h-dog" for record in coordinator.records)
    assert coordinator.cache.deleted[0].path == "/home/ana/photos/dog.png"


def test_failed_mutation_leaves_cache_untouched(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)
    before = coordinator.cache
    backend.fail("rename_file", "file is locked")

    outcome = asyncio.run(coordinator.rename(new_name="kitty.jpg", file_hash="h-cat"))

    assert not outcome.ok
    assert not outcome.skipped
    assert coordinator.cache is before
    assert coordinator.status == "Error: file is locked"
    assert backend.called("list_records") == []


def test_stale_flag_when_refetch_fails_after_success(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)
    backend.fail("list_records")

    outcome = asyncio.run(coordinator.add_file("/home/ana/extra.txt"))

    assert outcome.ok
    assert outcome.stale
    assert coordinator.status.startswith("Error:")


def test_index_folder_uses_date_as_default_snapshot(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)

    asyncio.run(coordinator.index_folder("/home/ana"))
    asyncio.run(coordinator.index_folder("/home/ana", "  before-trip "))

    names = [args[1] for args in backend.called("start_scan")]
    assert names == [default_snapshot_name(), "before-trip"]
    assert default_snapshot_name(date(2025, 3, 7)) == "07-03-2025"
    assert coordinator.cache.snapshots[0].name == "before-trip"


@pytest.mark.parametrize(
    ("action", "command"),
    [
        (lambda c: c.permanent_delete("h-dog", "/home/ana/photos/dog.png"), "delete_permanently"),
        (lambda c: c.clear_history(), "clear_history"),
        (lambda c: c.delete_snapshot("01-06-2024", 1_717_200_000), "delete_snapshot"),
        (lambda c: c.reset_vault(), "clear_vault"),
    ],
)
def test_destructive_actions_require_confirmation(backend: FakeBackend, action, command) -> None:
    declined = _loaded(backend, confirm=False)
    outcome = asyncio.run(action(declined))
    assert outcome.skipped
    assert backend.called(command) == []

    accepted = _loaded(backend, confirm=True)
    outcome = asyncio.run(action(accepted))
    assert outcome.ok
    assert len(backend.called(command)) == 1


def test_confirmation_prompt_text(backend: FakeBackend) -> None:
    prompts: list[str] = []
    coordinator = VaultCoordinator(backend, confirm=lambda p: prompts.append(p) or False)

    asyncio.run(coordinator.reset_vault())
    asyncio.run(coordinator.delete_snapshot("trip", 5))

    assert prompts[0] == "Reset entire vault index? History & snapshots are preserved."
    assert prompts[1].startswith('Delete snapshot record "trip"?')


def test_reset_and_snapshot_messages(backend: FakeBackend) -> None:
    coordinator = _loaded(backend, confirm=True)

    dropped = asyncio.run(coordinator.delete_snapshot("01-06-2024", 1_717_200_000))
    reset = asyncio.run(coordinator.reset_vault())

    assert dropped.message == 'Snapshot "01-06-2024" deleted.'
    assert coordinator.cache.snapshots == ()
    assert reset.message == "Vault reset."
    assert coordinator.records == []


def test_blank_inputs_are_no_ops(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)

    results = [
        asyncio.run(coordinator.rename(new_name="   ", file_hash="h-cat")),
        asyncio.run(coordinator.move("  ", file_hash="h-cat")),
        asyncio.run(coordinator.compress([], "out.zip")),
        asyncio.run(coordinator.open_with("/home/ana/notes.txt", "")),
    ]

    assert all(result.skipped for result in results)
    assert backend.calls == []


def test_rename_and_move_folders_by_path(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)

    renamed = asyncio.run(
        coordinator.rename(new_name="pictures", folder_path="/home/ana/photos")
    )
    moved = asyncio.run(coordinator.move("/archive", folder_path="/home/ana/music"))

    assert renamed.ok and moved.ok
    assert moved.message == "Moved to: /archive/music"
    paths = {record.path for record in coordinator.records}
    assert "/home/ana/pictures/dog.png" in paths
    assert "/archive/music/song.mp3" in paths


def test_rename_requires_a_target(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)

    with pytest.raises(ValueError):
        asyncio.run(coordinator.rename(new_name="x"))


def test_extract_refuses_non_archives(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)

    refused = asyncio.run(coordinator.extract("/home/ana/notes.txt", "/tmp/out"))
    accepted = asyncio.run(coordinator.extract("/home/ana/bundle.zip", "/tmp/out"))

    assert not refused.ok
    assert backend.called("extract") == [("/home/ana/bundle.zip", "/tmp/out")]
    assert accepted.ok


def test_compress_refetches_records(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)

    outcome = asyncio.run(coordinator.compress(["/home/ana/notes.txt"], "/home/ana/n.zip"))

    assert outcome.ok
    assert backend.called("list_records") == [()]


def test_open_file_refuses_ghost_files(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)
    backend.missing.add("/home/ana/notes.txt")

    ghost = asyncio.run(coordinator.open_file("/home/ana/notes.txt"))
    opened = asyncio.run(coordinator.open_file("/home/ana/music/song.mp3"))

    assert ghost.ghost and not ghost.ok
    assert ghost.message == "Ghost file: not found on disk."
    assert opened.ok
    assert backend.called("open_file") == [("/home/ana/music/song.mp3",)]


def test_properties_report_ghost_state(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)
    backend.missing.add("/home/ana/photos/dog.png")

    outcome = asyncio.run(coordinator.file_properties("h-dog"))
    folder = asyncio.run(coordinator.folder_properties("/home/ana/photos"))
    missing = asyncio.run(coordinator.file_properties("nope"))

    assert outcome.ok and outcome.ghost
    assert outcome.value.size == 4096
    assert folder.value.file_count == 2
    assert not folder.ghost
    assert not missing.ok


def test_verify_integrity_lists_changed_paths(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)
    backend.corrupted = ["/home/ana/notes.txt"]

    outcome = asyncio.run(coordinator.verify_integrity())

    assert outcome.value == ["/home/ana/notes.txt"]
    assert coordinator.status == "1 file(s) changed since indexing."


def test_scan_similar_reports_failures(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)
    index = SmartDedupIndex()
    backend.similar = [
        SimilarityTriple(
            representative_hash="h-cat", member_hashes=["h-dog"], similarity_pct=92
        )
    ]

    outcome = asyncio.run(coordinator.scan_similar(index))
    assert outcome.ok
    assert len(outcome.value) == 1

    backend.fail("find_similar_images")
    failed = asyncio.run(coordinator.scan_similar(index, 75))
    assert not failed.ok
    assert len(index.groups) == 1


def test_view_is_pure_function_of_cache_and_state(backend: FakeBackend) -> None:
    coordinator = _loaded(backend)
    state = BrowseState().go_to("/home/ana").filter("image")

    first = coordinator.view(state)
    second = coordinator.view(state)

    assert first == second
    assert [node.name for node in first.nodes] == ["photos", "backup"]
    assert len(first.duplicates) == 1
    assert {record.category for record in first.records} == {"image"}
