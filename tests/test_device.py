#!/usr/bin/env python3
''' test the per-device session '''

import asyncio

import pytest

from custom_components.panasonic_viera.commands import (
    GetMute,
    GetVolume,
    KeyCommand,
    SetMute,
    SetVolume,
)
from custom_components.panasonic_viera.device import DeviceState, VieraDevice
from custom_components.panasonic_viera.exceptions import (
    AuthenticationFailed,
    ProtocolError,
    TransportError,
    TransportTimeout,
)

from utils_viera import TV_HOST


class FakeClient:  # pylint: disable=too-many-instance-attributes
    ''' stands in for VieraSoapClient, records every call '''

    host = TV_HOST

    def __init__(self):
        self.calls = []
        self.volume = 20
        self.mute = False
        self.connect_error = None
        self.get_error = None
        self.key_error = None
        self.hold = None
        self.delay = 0

    async def _io(self, name):
        self.calls.append(("start", name))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.hold is not None:
            await self.hold.wait()
        self.calls.append(("end", name))

    async def async_connect(self):
        self.calls.append(("connect",))
        if self.connect_error:
            raise self.connect_error

    async def async_send_key(self, key):
        await self._io(f"key:{key}")
        if self.key_error:
            raise self.key_error
        if key == "VOLUP":
            self.volume += 1

    async def async_get_volume(self):
        await self._io("get_volume")
        if self.get_error:
            raise self.get_error
        return self.volume

    async def async_set_volume(self, volume):
        await self._io("set_volume")
        self.volume = volume

    async def async_get_mute(self):
        await self._io("get_mute")
        if self.get_error:
            raise self.get_error
        return self.mute

    async def async_set_mute(self, mute):
        await self._io("set_mute")
        self.mute = mute


class Sink:
    ''' collects reported state '''

    def __init__(self):
        self.values = {}
        self.reports = []

    def __call__(self, key, value, ack):
        assert ack is True
        self.values[key] = value
        self.reports.append((key, value))


class FakeProbe:
    ''' reachability probe with a settable answer '''

    def __init__(self, alive):
        self.alive = alive
        self.calls = []

    async def __call__(self, host):
        self.calls.append(host)
        if isinstance(self.alive, Exception):
            raise self.alive
        return self.alive


def make_device(alive=True):
    ''' device with a fake client, a fake probe and a sink '''
    client = FakeClient()
    sink = Sink()
    probe = FakeProbe(alive)
    device = VieraDevice(client, probe=probe, sink=sink)
    return device, client, sink, probe


# ---------------------- liveness cycle ----------------------

@pytest.mark.asyncio
async def test_check_status_alive():
    ''' a reachable TV reports connection, values and tv_on '''
    device, client, sink, probe = make_device()
    client.mute = True

    assert await device.async_check_status() is True

    assert probe.calls == [TV_HOST]
    assert device.state == DeviceState.READY
    assert device.session.connected is True
    assert sink.values == {"connection": True, "mute": True, "volume": 20, "tv_on": True}
    assert device.session.last_volume == 20
    assert device.session.last_mute is True


@pytest.mark.asyncio
async def test_check_status_unreachable():
    ''' an unreachable TV resets learned values and is not queried '''
    device, client, sink, probe = make_device()
    await device.async_check_status()

    probe.alive = False
    client.calls.clear()
    await device.async_check_status()

    assert device.state == DeviceState.UNREACHABLE
    assert client.calls == []
    assert sink.values["connection"] is False
    assert sink.values["volume"] is None
    assert sink.values["mute"] is None
    assert device.session.last_known_alive is False
    assert sink.values["tv_on"] is False
    assert device.session.tv_on is False


@pytest.mark.asyncio
async def test_probe_exception_means_unreachable():
    ''' a failing probe is treated as not alive '''
    device, _, sink, _ = make_device(alive=OSError("no route"))

    assert await device.async_check_status() is True
    assert device.state == DeviceState.UNREACHABLE
    assert sink.values["connection"] is False


@pytest.mark.asyncio
async def test_check_status_tv_off():
    ''' a reachable host whose render queries fail means the TV is off '''
    device, client, sink, _ = make_device()
    client.get_error = TransportError("refused")

    assert await device.async_check_status() is True

    assert sink.values["connection"] is True
    assert sink.values["tv_on"] is False
    assert device.session.last_volume is None


@pytest.mark.asyncio
async def test_check_status_one_query_answers():
    ''' any answered render query means the TV is on '''
    device, client, sink, _ = make_device()

    async def broken_mute():
        raise ProtocolError("field not found: CurrentMute")

    client.async_get_mute = broken_mute
    await device.async_check_status()

    assert sink.values["tv_on"] is True
    assert sink.values["mute"] is None
    assert sink.values["volume"] == 20


@pytest.mark.asyncio
async def test_check_status_auth_failed_then_recovers():
    ''' a rejected handshake is reported and retried on the next cycle '''
    device, client, sink, _ = make_device()
    client.connect_error = AuthenticationFailed("rejected")

    assert await device.async_check_status() is True
    assert device.state == DeviceState.AUTH_FAILED
    assert sink.values["tv_on"] is False
    assert ("start", "get_volume") not in client.calls

    client.connect_error = None
    await device.async_check_status()
    assert device.state == DeviceState.READY
    assert sink.values["tv_on"] is True


# ---------------------- commands ----------------------

@pytest.mark.asyncio
async def test_execute_dropped_when_unreachable():
    ''' commands are not sent before a successful probe '''
    device, client, _, _ = make_device()

    assert await device.async_execute(KeyCommand("POWER")) is False
    assert client.calls == []


@pytest.mark.asyncio
async def test_execute_set_volume_confirms():
    ''' set volume is followed by a get when confirming '''
    device, client, sink, _ = make_device()
    await device.async_check_status()
    client.calls.clear()

    assert await device.async_execute(SetVolume(33)) is True

    names = [call[1] for call in client.calls if call[0] == "start"]
    assert names == ["set_volume", "get_volume"]
    assert client.calls[0] == ("connect",)
    assert sink.values["volume"] == 33
    assert sink.values["tv_on"] is True


@pytest.mark.asyncio
async def test_execute_set_mute_without_confirm():
    ''' confirmation is opt-in '''
    device, client, _, _ = make_device()
    await device.async_check_status()
    client.calls.clear()

    await device.async_execute(SetMute(True), confirm=False)

    names = [call[1] for call in client.calls if call[0] == "start"]
    assert names == ["set_mute"]


@pytest.mark.asyncio
async def test_execute_volume_key_refreshes_volume():
    ''' volume keys are followed by a volume read '''
    device, client, sink, _ = make_device()
    await device.async_check_status()

    await device.async_execute(KeyCommand("VOLUP"))
    assert sink.values["volume"] == 21


@pytest.mark.asyncio
async def test_execute_plain_key_does_not_query():
    ''' other keys are just sent '''
    device, client, _, _ = make_device()
    await device.async_check_status()
    client.calls.clear()

    await device.async_execute(KeyCommand("MENU"))
    names = [call[1] for call in client.calls if call[0] == "start"]
    assert names == ["key:MENU"]


@pytest.mark.asyncio
async def test_execute_getters():
    ''' get commands report their values '''
    device, client, sink, _ = make_device()
    await device.async_check_status()
    client.volume = 55
    client.mute = True

    await device.async_execute(GetVolume())
    await device.async_execute(GetMute())
    assert sink.values["volume"] == 55
    assert sink.values["mute"] is True


@pytest.mark.asyncio
async def test_execute_transport_error_is_raised():
    ''' errors are classified and re-raised, tv is reported off '''
    device, client, sink, _ = make_device()
    await device.async_check_status()
    client.key_error = TransportError("refused")

    with pytest.raises(TransportError):
        await device.async_execute(KeyCommand("MENU"))
    assert sink.values["tv_on"] is False
    assert device.busy is False


@pytest.mark.asyncio
async def test_execute_auth_failure_is_raised():
    ''' a rejected handshake aborts the command '''
    device, client, _, _ = make_device()
    await device.async_check_status()
    client.connect_error = AuthenticationFailed("rejected")
    client.calls.clear()

    with pytest.raises(AuthenticationFailed):
        await device.async_execute(KeyCommand("MENU"))
    assert client.calls == [("connect",)]
    assert device.state == DeviceState.AUTH_FAILED


# ---------------------- concurrency ----------------------

@pytest.mark.asyncio
async def test_commands_are_serialized():
    ''' the second command starts only after the first one finished '''
    device, client, _, _ = make_device()
    await device.async_check_status()
    client.calls.clear()
    client.delay = 0.01

    await asyncio.gather(
        device.async_execute(KeyCommand("MENU"), confirm=False),
        device.async_execute(KeyCommand("EXIT"), confirm=False),
    )

    io_calls = [call for call in client.calls if call[0] != "connect"]
    assert io_calls == [
        ("start", "key:MENU"),
        ("end", "key:MENU"),
        ("start", "key:EXIT"),
        ("end", "key:EXIT"),
    ]


@pytest.mark.asyncio
async def test_probe_suppressed_while_command_in_flight():
    ''' no new status cycle while a command holds the device '''
    device, client, _, probe = make_device()
    await device.async_check_status()
    probe.calls.clear()

    client.hold = asyncio.Event()
    task = asyncio.create_task(device.async_execute(KeyCommand("MENU")))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert device.busy is True

    assert await device.async_check_status() is False
    assert probe.calls == []

    client.hold.set()
    assert await task is True
    assert device.busy is False
    assert await device.async_check_status() is True
    assert probe.calls == [TV_HOST]


@pytest.mark.asyncio
async def test_lock_released_on_timeout():
    ''' a caller timeout frees the device for the next command '''
    device, client, _, _ = make_device()
    await device.async_check_status()

    client.hold = asyncio.Event()
    with pytest.raises(TransportTimeout):
        await device.async_execute(KeyCommand("MENU"), timeout=0.05)
    assert device.busy is False

    client.hold = None
    assert await device.async_execute(KeyCommand("EXIT"), confirm=False) is True


@pytest.mark.asyncio
async def test_lock_released_on_cancel():
    ''' cancelling a queued or running command frees the device '''
    device, client, _, _ = make_device()
    await device.async_check_status()

    client.hold = asyncio.Event()
    task = asyncio.create_task(device.async_execute(KeyCommand("MENU")))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert device.busy is True

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert device.busy is False


@pytest.mark.asyncio
async def test_devices_do_not_share_state():
    ''' state is partitioned per device '''
    first, first_client, first_sink, _ = make_device()
    second, _, second_sink, _ = make_device(alive=False)

    await first.async_check_status()
    first_client.hold = asyncio.Event()
    task = asyncio.create_task(first.async_execute(KeyCommand("MENU")))
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert await second.async_check_status() is True
    assert second_sink.values["connection"] is False
    assert first_sink.values["connection"] is True

    first_client.hold.set()
    await task
