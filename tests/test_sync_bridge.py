"""Tests for the snapshot stores and sync bridges."""
import json
from unittest.mock import Mock, patch

import pytest

from barjukebox.core.coordinator import LifecycleCoordinator
from barjukebox.core.store import BLACKLIST_KEY, REQUESTS_KEY, FileStore, MemoryStore, SnapshotStore
from barjukebox.core.sync_bridge import FileBridge, LocalBus, SyncBridge

AFRICA = '[{"id": "toto-africa", "title": "Africa", "artist": "Toto", "requestCount": 1}]'
BABY_SHARK = '[{"id": "pinkfong-baby-shark", "title": "Baby Shark", "artist": "Pinkfong"}]'


class TestStores:
    def test_memory_store(self):
        store = MemoryStore()
        assert store.read(REQUESTS_KEY) is None
        store.write(REQUESTS_KEY, "[]")
        assert store.read(REQUESTS_KEY) == "[]"

    def test_file_store_one_file_per_key(self, tmp_path):
        store = FileStore(tmp_path / "data")
        assert store.read(BLACKLIST_KEY) is None
        store.write(BLACKLIST_KEY, "[]")
        assert (tmp_path / "data" / "blacklist.json").read_text() == "[]"
        assert store.read(BLACKLIST_KEY) == "[]"
        assert not list((tmp_path / "data").glob("*.tmp"))


class TestLocalBus:
    def test_publish_reaches_others_not_sender(self):
        bus = LocalBus()
        a, b = bus.connect(), bus.connect()
        seen_a, seen_b = Mock(), Mock()
        a.on_external_change(seen_a)
        b.on_external_change(seen_b)
        a.publish(REQUESTS_KEY, "[]")
        seen_b.assert_called_once_with(REQUESTS_KEY, "[]")
        seen_a.assert_not_called()
        assert bus.store.read(REQUESTS_KEY) == "[]"

    def test_disconnected_bridge_is_silent(self):
        bus = LocalBus()
        a, b = bus.connect(), bus.connect()
        handler = Mock()
        b.on_external_change(handler)
        bus.disconnect(b)
        a.publish(REQUESTS_KEY, "[]")
        handler.assert_not_called()

    def test_failing_handler_does_not_stop_others(self):
        bus = LocalBus()
        a, b = bus.connect(), bus.connect()
        b.on_external_change(Mock(side_effect=ValueError("boom")))
        second = Mock()
        b.on_external_change(second)
        a.publish(REQUESTS_KEY, "[]")
        second.assert_called_once_with(REQUESTS_KEY, "[]")


class TestFileBridge:
    def test_own_writes_are_not_reported(self, tmp_path):
        bridge = FileBridge(tmp_path)
        handler = Mock()
        bridge.on_external_change(handler)
        bridge.publish(REQUESTS_KEY, "[]")
        assert bridge.poll() == []
        handler.assert_not_called()

    def test_other_process_write_is_reported_once(self, tmp_path):
        bridge = FileBridge(tmp_path)
        handler = Mock()
        bridge.on_external_change(handler)
        FileStore(tmp_path).write(BLACKLIST_KEY, '[{"id": "a-t", "title": "t", "artist": "a"}]')
        assert bridge.poll() == [BLACKLIST_KEY]
        assert bridge.poll() == []
        handler.assert_called_once()

    def test_two_coordinators_share_files(self, tmp_path, clock):
        customer = LifecycleCoordinator(FileBridge(tmp_path), clock=clock)
        dj_bridge = FileBridge(tmp_path)
        dj = LifecycleCoordinator(dj_bridge, clock=clock)
        song_id = customer.request_song("Africa", "Toto").request.song_id
        assert dj.list_requests() == []
        dj_bridge.poll()
        assert [r.song_id for r in dj.list_requests()] == [song_id]

    def test_restart_reloads_ledgers(self, tmp_path, clock):
        first = LifecycleCoordinator(FileBridge(tmp_path), clock=clock)
        song_id = first.request_song("Africa", "Toto").request.song_id
        first.play_song(song_id)
        restarted = LifecycleCoordinator(FileBridge(tmp_path), clock=clock)
        assert [c.song_id for c in restarted.list_cooldowns()] == [song_id]

    def test_watch_thread_start_stop(self, tmp_path):
        bridge = FileBridge(tmp_path)
        bridge.start_watching(interval_sec=0.01)
        bridge.stop_watching()
        assert bridge._watch_thread is None


class TestInterfaces:
    def test_store_without_write_cannot_be_created(self):
        class ReadOnly(SnapshotStore):
            def read(self, key):
                return None

        with pytest.raises(TypeError):
            ReadOnly()

    def test_bridge_without_publish_cannot_be_created(self):
        class Silent(SyncBridge):
            pass

        with pytest.raises(TypeError):
            Silent(MemoryStore())


class TestCorruptFiles:
    """Damaged store files empty the matching ledger and never stop the app or the sync."""

    def test_non_utf8_file_reads_as_unusable(self, tmp_path):
        (tmp_path / "blacklist.json").write_bytes(b'[{"id": "\xff\xfe"}]')
        assert FileStore(tmp_path).read(BLACKLIST_KEY) == ""

    def test_non_utf8_file_at_startup(self, tmp_path, clock):
        (tmp_path / "blacklist.json").write_bytes(b'[{"id": "\xff\xfe"}]')
        FileStore(tmp_path).write(REQUESTS_KEY, AFRICA)
        coordinator = LifecycleCoordinator(FileBridge(tmp_path), clock=clock)
        assert coordinator.list_blacklist() == []
        assert [r.song_id for r in coordinator.list_requests()] == ["toto-africa"]

    def test_truncated_file_at_startup(self, tmp_path, clock):
        (tmp_path / "songRequests.json").write_text(AFRICA[:25], encoding="utf-8")
        coordinator = LifecycleCoordinator(FileBridge(tmp_path), clock=clock)
        assert coordinator.list_requests() == []
        coordinator.request_song("Africa", "Toto")
        assert json.loads(FileStore(tmp_path).read(REQUESTS_KEY))[0]["id"] == "toto-africa"

    def test_corrupt_key_does_not_block_other_keys(self, tmp_path, clock):
        bridge = FileBridge(tmp_path)
        dj = LifecycleCoordinator(bridge, clock=clock)
        (tmp_path / "songRequests.json").write_bytes(b"\xff\xfe\x00garbage")
        FileStore(tmp_path).write(BLACKLIST_KEY, BABY_SHARK)
        assert sorted(bridge.poll()) == sorted([REQUESTS_KEY, BLACKLIST_KEY])
        assert [b.song_id for b in dj.list_blacklist()] == ["pinkfong-baby-shark"]
        assert dj.list_requests() == []

    def test_truncated_file_during_poll_empties_ledger(self, tmp_path, clock):
        FileStore(tmp_path).write(REQUESTS_KEY, AFRICA)
        bridge = FileBridge(tmp_path)
        dj = LifecycleCoordinator(bridge, clock=clock)
        assert len(dj.list_requests()) == 1
        (tmp_path / "songRequests.json").write_text(AFRICA[:25], encoding="utf-8")
        assert bridge.poll() == [REQUESTS_KEY]
        assert dj.list_requests() == []


class TestPollOrdering:
    def test_local_write_during_poll_wins(self, tmp_path, clock):
        """A local request made while an external change is in flight stays in memory and on disk."""
        bridge = FileBridge(tmp_path)
        dj = LifecycleCoordinator(bridge, clock=clock)
        FileStore(tmp_path).write(REQUESTS_KEY, AFRICA)
        deliver = bridge._notify

        def request_then_deliver(key, value):
            dj.request_song("Hey Ya", "OutKast")
            deliver(key, value)

        with patch.object(bridge, "_notify", side_effect=request_then_deliver):
            bridge.poll()

        on_disk = [item["id"] for item in json.loads(FileStore(tmp_path).read(REQUESTS_KEY))]
        assert on_disk == ["outkast-hey-ya"]
        assert [r.song_id for r in dj.list_requests()] == on_disk
        assert bridge.poll() == []
