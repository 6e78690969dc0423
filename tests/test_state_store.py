import asyncio

import pytest


class TestRecord:
    def test_set_merges_and_none_deletes(self, store):
        record = store.get_record("lights/a/set")

        record.set({"state": "ON", "color": {"r": 1, "g": 2, "b": 3}})
        record.set({"brightness": 10, "color": None})

        assert record.get() == {"state": "ON", "brightness": 10}

    def test_get_returns_copy(self, store):
        record = store.get_record("lights/a/set")
        record.set({"color": {"r": 1, "g": 2, "b": 3}})

        record.get()["color"]["r"] = 99

        assert record.get()["color"]["r"] == 1

    def test_handles_share_document(self, store):
        store.get_record("lights/a/set").set({"state": "ON"})

        assert store.get_record("lights/a/set").get() == {"state": "ON"}

    def test_revision_follows_write_order(self, store):
        first = store.get_record("lights/a/is")
        second = store.get_record("lights/a/set")
        assert first.revision == 0

        second.set({"state": "ON"})
        first.set({"state": "OFF"})

        assert first.revision > second.revision

    def test_clear(self, store):
        record = store.get_record("lights/a/set")
        record.set({"state": "ON"})

        record.clear()

        assert record.get() == {}

    def test_replace_drops_previous_fields(self, store):
        record = store.get_record("lights/a/set")
        record.set({"state": "OFF", "transition": 0.2})

        record.replace({"brightness": 125, "color": None})

        assert record.get() == {"brightness": 125}


class TestSubscriptions:
    @pytest.mark.asyncio
    async def test_notified_after_write_not_during(self, store):
        record = store.get_record("lights/a/set")
        seen = []
        record.subscribe(seen.append)

        record.set({"state": "ON"})
        assert seen == []

        await asyncio.sleep(0)
        assert seen == [{"state": "ON"}]

    @pytest.mark.asyncio
    async def test_emit_initial(self, store):
        store.get_record("lights/a/set").set({"state": "ON"})
        seen = []

        store.get_record("lights/a/set").subscribe(seen.append, emit_initial=True)
        await asyncio.sleep(0)

        assert seen == [{"state": "ON"}]

    @pytest.mark.asyncio
    async def test_discard_stops_notifications(self, store):
        record = store.get_record("lights/a/set")
        seen = []
        subscription = record.subscribe(seen.append)

        record.set({"state": "ON"})
        subscription.discard()
        await asyncio.sleep(0)

        assert seen == []

    @pytest.mark.asyncio
    async def test_record_discard_only_drops_own_subscriptions(self, store):
        mine = store.get_record("lights/a/set")
        other = store.get_record("lights/a/set")
        seen_mine, seen_other = [], []
        mine.subscribe(seen_mine.append)
        other.subscribe(seen_other.append)

        mine.discard()
        other.set({"state": "ON"})
        await asyncio.sleep(0)

        assert seen_mine == []
        assert seen_other == [{"state": "ON"}]

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_break_others(self, store):
        record = store.get_record("lights/a/set")
        seen = []

        def broken(_):
            raise RuntimeError("boom")

        record.subscribe(broken)
        record.subscribe(seen.append)
        record.set({"state": "ON"})
        await asyncio.sleep(0)

        assert seen == [{"state": "ON"}]

    @pytest.mark.asyncio
    async def test_when_ready(self, store):
        await asyncio.wait_for(store.get_record("lights/a/set").when_ready(), 1)
