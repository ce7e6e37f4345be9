import pytest

from src.platform.event.in_memory_broadcaster import InMemoryEventBroadcasterImpl


@pytest.mark.unit
class TestInMemoryEventBroadcaster:
    @pytest.mark.asyncio
    async def test_publish_reaches_subscribers_of_the_event_only(self) -> None:
        broadcaster = InMemoryEventBroadcasterImpl()
        first = await broadcaster.subscribe(event_id='event-1')
        second = await broadcaster.subscribe(event_id='event-1')
        other = await broadcaster.subscribe(event_id='event-2')

        await broadcaster.publish(
            event_id='event-1', topic='update-seat', payload={'seat_id': 'S1', 'state': 'blocked'}
        )

        expected = {'topic': 'update-seat', 'payload': {'seat_id': 'S1', 'state': 'blocked'}}
        assert first.receive_nowait() == expected
        assert second.receive_nowait() == expected
        assert other.statistics().current_buffer_used == 0

    @pytest.mark.asyncio
    async def test_publish_without_subscribers_is_a_no_op(self) -> None:
        broadcaster = InMemoryEventBroadcasterImpl()

        await broadcaster.publish(event_id='event-1', topic='update-event', payload={})

        assert broadcaster.subscriber_count(event_id='event-1') == 0

    @pytest.mark.asyncio
    async def test_full_stream_drops_instead_of_blocking(self) -> None:
        broadcaster = InMemoryEventBroadcasterImpl(buffer_size=1)
        stream = await broadcaster.subscribe(event_id='event-1')

        await broadcaster.publish(event_id='event-1', topic='update-ticket', payload={'n': 1})
        await broadcaster.publish(event_id='event-1', topic='update-ticket', payload={'n': 2})

        assert stream.receive_nowait()['payload'] == {'n': 1}
        assert stream.statistics().current_buffer_used == 0
        assert broadcaster.subscriber_count(event_id='event-1') == 1

    @pytest.mark.asyncio
    async def test_closed_subscribers_are_pruned(self) -> None:
        broadcaster = InMemoryEventBroadcasterImpl()
        stream = await broadcaster.subscribe(event_id='event-1')
        await stream.aclose()

        await broadcaster.publish(event_id='event-1', topic='update-event', payload={})

        assert broadcaster.subscriber_count(event_id='event-1') == 0

    @pytest.mark.asyncio
    async def test_unsubscribe(self) -> None:
        broadcaster = InMemoryEventBroadcasterImpl()
        stream = await broadcaster.subscribe(event_id='event-1')

        await broadcaster.unsubscribe(event_id='event-1', stream=stream)
        await broadcaster.unsubscribe(event_id='event-1', stream=stream)

        assert broadcaster.subscriber_count(event_id='event-1') == 0
