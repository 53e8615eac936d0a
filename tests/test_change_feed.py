import pytest

from deliveryapp.store.change_feed import DELETE, INSERT, UPDATE, ChangeEvent, ChangeFeed


def test_delivers_matching_events_in_subscription_order():
    feed = ChangeFeed()
    seen = []
    feed.subscribe("orders", [INSERT], lambda e: seen.append(("first", e.kind)))
    feed.subscribe("orders", "*", lambda e: seen.append(("second", e.kind)))
    feed.subscribe("products", "*", lambda e: seen.append(("products", e.kind)))

    feed.publish(ChangeEvent("orders", INSERT, {"id": "1"}))
    feed.publish(ChangeEvent("orders", UPDATE, {"id": "1"}))

    assert seen == [("first", INSERT), ("second", INSERT), ("second", UPDATE)]


def test_unsubscribe_is_idempotent():
    feed = ChangeFeed()
    seen = []
    channel = feed.subscribe("orders", "*", seen.append)

    channel.unsubscribe()
    channel.unsubscribe()
    feed.publish(ChangeEvent("orders", DELETE, {}, {"id": "1"}))

    assert seen == []
    assert feed.channel_count() == 0


def test_failing_callback_does_not_block_others():
    feed = ChangeFeed()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    feed.subscribe("orders", "*", broken)
    feed.subscribe("orders", "*", seen.append)

    feed.publish(ChangeEvent("orders", INSERT, {"id": "1"}))

    assert len(seen) == 1


def test_rejects_unknown_kinds():
    with pytest.raises(ValueError):
        ChangeFeed().subscribe("orders", ["upsert"], lambda e: None)


def test_channel_count_by_table():
    feed = ChangeFeed()
    feed.subscribe("orders", "*", lambda e: None)
    feed.subscribe("orders", "*", lambda e: None)
    feed.subscribe("settings", "*", lambda e: None)

    assert feed.channel_count() == 3
    assert feed.channel_count("orders") == 2
