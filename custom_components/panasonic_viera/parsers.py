"""Response parsers for Panasonic Viera SOAP API.

Vendor responses are flat and predictable, so fields are pulled out with a
pattern match over the raw text instead of a DOM.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .exceptions import ProtocolError

_LOGGER = logging.getLogger(__name__)

_VOLUME_RE = re.compile(r"<CurrentVolume>(\d+)</CurrentVolume>")
_MUTE_RE = re.compile(r"<CurrentMute>([01])</CurrentMute>")
_ERROR_CODE_RE = re.compile(r"<errorCode>\s*([^<]*?)\s*</errorCode>")
_ERROR_DESC_RE = re.compile(r"<errorDescription>\s*([^<]*?)\s*</errorDescription>")


# ---------------------- Shared Helper ----------------------

def _first_capture(pattern: re.Pattern[str], xml: Optional[str], field: str) -> str:
    """Return the first capture of pattern, or raise 'field not found'."""
    match = pattern.search(xml or "")
    if match is None:
        _LOGGER.debug("Field %s not found in response: %s", field, xml)
        raise ProtocolError(f"field not found: {field}")
    return match.group(1)


def find_field(xml: Optional[str], tag: str) -> str:
    """Return the text of the first <tag> element in xml."""
    pattern = re.compile(rf"<{re.escape(tag)}>([^<]*)</{re.escape(tag)}>")
    return _first_capture(pattern, xml, tag)


# ---------------------- Individual Parsers ----------------------

def parse_volume(xml: Optional[str]) -> int:
    """Parse GetVolume SOAP response."""
    return int(_first_capture(_VOLUME_RE, xml, "CurrentVolume"))


def parse_mute(xml: Optional[str]) -> bool:
    """Parse GetMute SOAP response."""
    return _first_capture(_MUTE_RE, xml, "CurrentMute") == "1"


def parse_upnp_error(xml: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Return (errorCode, errorDescription) of a UPnP fault, or (None, None)."""
    code = _ERROR_CODE_RE.search(xml or "")
    desc = _ERROR_DESC_RE.search(xml or "")
    return (
        code.group(1) if code else None,
        desc.group(1) if desc else None,
    )


def parse_session(decrypted: str) -> tuple[str, int]:
    """Parse the decrypted X_GetEncryptSessionId result into (session id, seq num)."""
    session_id = find_field(decrypted, "X_SessionId")
    seq_num = find_field(decrypted, "X_SessionSeqNum")
    try:
        return session_id, int(seq_num)
    except ValueError as err:
        raise ProtocolError(f"Invalid session sequence number: {seq_num!r}") from err


def parse_auth_result(decrypted: str) -> tuple[str, str]:
    """Parse the decrypted X_RequestAuth result into (app id, encryption key)."""
    return find_field(decrypted, "X_ApplicationId"), find_field(decrypted, "X_Keyword")
