"""Command encoder for Panasonic Viera TVs (pure, no I/O).

Every logical command maps to exactly one ``SoapRequest``: remote keys go to
the network control service, volume and mute go to the UPnP rendering
control service. The two path/URN pairs are never mixed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from .const import (
    ACTION_SEND_KEY,
    SOAP_ENCODING_NS,
    SOAP_ENVELOPE_NS,
    URL_CONTROL_DMR,
    URL_CONTROL_NRC,
    URN_REMOTE_CONTROL,
    URN_RENDERING_CONTROL,
    VIERA_KEYS,
)
from .exceptions import InvalidArgument

_LOGGER = logging.getLogger(__name__)

RENDER_PARAMS = "<InstanceID>0</InstanceID><Channel>Master</Channel>"

MIN_VOLUME = 0
MAX_VOLUME = 100


def validate_volume(volume: object) -> int:
    """Return volume if it is an integer in [0, 100], else raise InvalidArgument."""
    if isinstance(volume, bool) or not isinstance(volume, int):
        raise InvalidArgument(f"Volume must be an integer, got {volume!r}")
    if not MIN_VOLUME <= volume <= MAX_VOLUME:
        raise InvalidArgument(
            f"Volume must be in range from {MIN_VOLUME} to {MAX_VOLUME}, got {volume}"
        )
    return volume


# ------------------------- commands -------------------------

@dataclass(frozen=True)
class KeyCommand:
    """A remote control button press."""

    key: str


@dataclass(frozen=True)
class GetVolume:
    """Read the current volume."""


@dataclass(frozen=True)
class SetVolume:
    """Set the volume to an absolute value in [0, 100]."""

    volume: int

    def __post_init__(self) -> None:
        validate_volume(self.volume)


@dataclass(frozen=True)
class GetMute:
    """Read the current mute setting."""


@dataclass(frozen=True)
class SetMute:
    """Turn mute on or off."""

    mute: bool


Command = Union[KeyCommand, GetVolume, SetVolume, GetMute, SetMute]


# ------------------------- request -------------------------

@dataclass(frozen=True)
class SoapRequest:
    """Everything needed to POST one SOAP action to the TV."""

    path: str
    urn: str
    action: str
    params: str

    @property
    def soap_action(self) -> str:
        return f'"urn:{self.urn}#{self.action}"'

    @property
    def envelope(self) -> str:
        """Wrap the action element into a SOAP 1.1 envelope."""
        return (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            f'<s:Envelope xmlns:s="{SOAP_ENVELOPE_NS}" s:encodingStyle="{SOAP_ENCODING_NS}">\n'
            " <s:Body>\n"
            f'  <u:{self.action} xmlns:u="urn:{self.urn}">{self.params}</u:{self.action}>\n'
            " </s:Body>\n"
            "</s:Envelope>\n"
        )

    @property
    def body(self) -> bytes:
        return self.envelope.encode("utf-8")

    @property
    def content_length(self) -> int:
        return len(self.body)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": 'text/xml; charset="utf-8"',
            "Content-Length": str(self.content_length),
            "SOAPACTION": self.soap_action,
        }

    @property
    def action_element(self) -> str:
        """The bare action element, as embedded in an encrypted command."""
        return f'<u:{self.action} xmlns:u="urn:{self.urn}">{self.params}</u:{self.action}>'


def nrc_request(action: str, params: str) -> SoapRequest:
    """Build a request for the vendor network control service."""
    return SoapRequest(URL_CONTROL_NRC, URN_REMOTE_CONTROL, action, params)


def dmr_request(action: str, params: str = "") -> SoapRequest:
    """Build a request for the UPnP rendering control service."""
    return SoapRequest(URL_CONTROL_DMR, URN_RENDERING_CONTROL, action, RENDER_PARAMS + params)


def key_event(key: str) -> str:
    """Return the vendor key event code for a key name."""
    code = key.upper()
    if code.startswith("NRC_") and code.endswith("-ONOFF"):
        return code
    return f"NRC_{code}-ONOFF"


def command_for(name: str, value: object = None) -> Command:
    """Translate a host-level command name into a Command.

    ``mute`` and ``volume`` set the render values, ``get_mute`` and
    ``get_volume`` read them; anything else is a remote key, looked up in
    VIERA_KEYS by friendly name and passed through verbatim otherwise.
    """
    match name:
        case "mute":
            return SetMute(bool(value))
        case "volume":
            return SetVolume(value)  # type: ignore[arg-type]
        case "get_mute":
            return GetMute()
        case "get_volume":
            return GetVolume()
        case _:
            return KeyCommand(VIERA_KEYS.get(name.lower(), name))


def encode(command: Command) -> SoapRequest:
    """Map a command to its SOAP request."""
    match command:
        case KeyCommand(key=key):
            request = nrc_request(ACTION_SEND_KEY, f"<X_KeyEvent>{key_event(key)}</X_KeyEvent>")
        case GetVolume():
            request = dmr_request("GetVolume")
        case SetVolume(volume=volume):
            volume = validate_volume(volume)
            request = dmr_request("SetVolume", f"<DesiredVolume>{volume}</DesiredVolume>")
        case GetMute():
            request = dmr_request("GetMute")
        case SetMute(mute=mute):
            request = dmr_request("SetMute", f"<DesiredMute>{'1' if mute else '0'}</DesiredMute>")
        case _:
            raise InvalidArgument(f"Unsupported command: {command!r}")

    _LOGGER.debug("Encoded %r as %s %s", command, request.path, request.action)
    return request
