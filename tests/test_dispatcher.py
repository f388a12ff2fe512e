"""Tests for notification fan-out to channels."""

import pytest

from pantry_watch.dispatcher import (
    Channel,
    Dispatcher,
    LocalAlertChannel,
    RemoteMessageChannel,
)
from pantry_watch.errors import DeliveryFailure
from pantry_watch.models import Notification, Severity, Status


def _notification(nid="n1", status=Status.EXPIRING_SOON):
    severity = Severity.DANGER if status is Status.EXPIRED else Severity.WARNING
    return Notification(
        id=nid,
        item_id="eggs",
        item_name="Eggs",
        severity=severity,
        status=status,
        message="Eggs is expiring soon (in 2 days)",
    )


class RecordingChannel(Channel):
    def __init__(self, name="recording"):
        self.name = name
        self.sent = []

    async def send(self, notification):
        self.sent.append(notification)


class BrokenChannel(Channel):
    name = "broken"

    async def send(self, notification):
        raise ConnectionError("smtp down")


@pytest.mark.asyncio
async def test_dispatch_to_all_channels():
    a, b = RecordingChannel("a"), RecordingChannel("b")
    report = await Dispatcher([a, b]).dispatch([_notification("1"), _notification("2")])
    assert [n.id for n in a.sent] == ["1", "2"]
    assert [n.id for n in b.sent] == ["1", "2"]
    assert report.delivered == 4
    assert report.ok


@pytest.mark.asyncio
async def test_failing_channel_does_not_block_others():
    good = RecordingChannel()
    report = await Dispatcher([BrokenChannel(), good]).dispatch([_notification()])
    assert len(good.sent) == 1
    assert report.delivered == 1
    assert not report.ok
    (failure,) = report.failures
    assert failure.channel == "broken"
    assert failure.notification_id == "n1"
    assert isinstance(failure.cause, ConnectionError)


@pytest.mark.asyncio
async def test_no_channels():
    report = await Dispatcher().dispatch([_notification()])
    assert report.delivered == 0
    assert report.ok


class TestLocalAlertChannel:
    @pytest.mark.asyncio
    async def test_sends_title_and_body(self):
        calls = []

        async def send_local(title, body):
            calls.append((title, body))

        await LocalAlertChannel(send_local).send(_notification(status=Status.EXPIRED))
        assert calls == [("Product expired", "Eggs is expiring soon (in 2 days)")]

    @pytest.mark.asyncio
    async def test_unavailable_is_silent(self):
        async def send_local(title, body):
            raise PermissionError("notifications denied")

        # Must not raise
        await LocalAlertChannel(send_local).send(_notification())


class TestRemoteMessageChannel:
    @pytest.mark.asyncio
    async def test_sends_to_every_recipient(self):
        calls = []

        async def send_remote(address, subject, body):
            calls.append((address, subject))
            return True

        channel = RemoteMessageChannel(send_remote, ["a@example.com", "b@example.com"])
        await channel.send(_notification())
        assert calls == [
            ("a@example.com", "Product expiring soon"),
            ("b@example.com", "Product expiring soon"),
        ]

    @pytest.mark.asyncio
    async def test_false_result_is_a_failure(self):
        async def send_remote(address, subject, body):
            return address != "bad@example.com"

        channel = RemoteMessageChannel(send_remote, ["ok@example.com", "bad@example.com"])
        with pytest.raises(DeliveryFailure, match="bad@example.com"):
            await channel.send(_notification())

    @pytest.mark.asyncio
    async def test_exception_is_a_failure(self):
        async def send_remote(address, subject, body):
            raise TimeoutError()

        channel = RemoteMessageChannel(send_remote, ["a@example.com"])
        with pytest.raises(DeliveryFailure):
            await channel.send(_notification())

    @pytest.mark.asyncio
    async def test_recipient_provider_called_each_time(self):
        addresses = []
        calls = []

        async def send_remote(address, subject, body):
            calls.append(address)
            return True

        channel = RemoteMessageChannel(send_remote, lambda: addresses)
        await channel.send(_notification())
        assert calls == []

        addresses.append("late@example.com")
        await channel.send(_notification())
        assert calls == ["late@example.com"]

    @pytest.mark.asyncio
    async def test_failure_reported_through_dispatcher(self):
        async def send_remote(address, subject, body):
            return False

        local = RecordingChannel("local")
        remote = RemoteMessageChannel(send_remote, ["a@example.com"])
        report = await Dispatcher([remote, local]).dispatch([_notification()])
        assert len(local.sent) == 1
        assert [f.channel for f in report.failures] == ["remote"]
