"""Tests for the event bus."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flightsurety.events import Event, EventBus, EventType

if TYPE_CHECKING:
    from _pytest.logging import LogCaptureFixture
    from pytest_mock.plugin import MockerFixture


def test_subscribers_receive_matching_events(mocker: "MockerFixture") -> None:
    bus = EventBus()
    on_paid = mocker.Mock()
    on_any = mocker.Mock()
    bus.subscribe(EventType.CREDIT_PAID, on_paid)
    bus.subscribe(None, on_any)

    bus.publish(EventType.CREDIT_PAID, passenger="p1", amount=3)
    bus.publish(EventType.FLIGHT_REGISTERED, flight="ND1309")

    assert on_paid.call_count == 1
    assert on_paid.call_args[0][0].payload == {"passenger": "p1", "amount": 3}
    assert on_any.call_count == 2


def test_unsubscribe_stops_delivery(mocker: "MockerFixture") -> None:
    bus = EventBus()
    handler = mocker.Mock()
    bus.subscribe(EventType.CREDIT_PAID, handler)
    bus.unsubscribe(EventType.CREDIT_PAID, handler)

    bus.publish(EventType.CREDIT_PAID, passenger="p1", amount=3)

    handler.assert_not_called()


def test_failing_subscriber_does_not_break_publish(caplog: "LogCaptureFixture", mocker: "MockerFixture") -> None:
    bus = EventBus()
    after = mocker.Mock()
    bus.subscribe(EventType.ORACLE_REQUEST, mocker.Mock(side_effect=RuntimeError("boom")))
    bus.subscribe(EventType.ORACLE_REQUEST, after)

    event = bus.publish(EventType.ORACLE_REQUEST, index=1)

    after.assert_called_once_with(event)
    assert "failed on oracle_request" in caplog.text


def test_history_is_bounded_and_filterable() -> None:
    bus = EventBus(history_size=2)
    bus.publish(EventType.AIRLINE_APPLIED, airline="a1")
    bus.publish(EventType.AIRLINE_FUNDED, airline="a1")
    bus.publish(EventType.AIRLINE_APPLIED, airline="a2")

    assert [event.payload["airline"] for event in bus.history()] == ["a1", "a2"]
    assert len(bus.history(EventType.AIRLINE_APPLIED)) == 1


def test_event_json_round_trip() -> None:
    event = Event(event_type=EventType.FLIGHT_STATUS_INFO, payload={"flight": "ND1309", "status": 20})

    restored = Event.from_json(event.to_json())

    assert restored == event
