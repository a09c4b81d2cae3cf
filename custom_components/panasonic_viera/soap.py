"""SOAP client for Panasonic Viera TV (transport and session layer)."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
from dataclasses import dataclass
from typing import Optional
from xml.sax.saxutils import escape

import aiohttp

from . import parsers
from .commands import (
    Command,
    GetMute,
    GetVolume,
    KeyCommand,
    SetMute,
    SetVolume,
    SoapRequest,
    encode,
    nrc_request,
)
from .const import (
    ACTION_DISPLAY_PIN_CODE,
    ACTION_ENCRYPTED_COMMAND,
    ACTION_GET_SESSION_ID,
    ACTION_REQUEST_AUTH,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    SOAP_BASE_URL,
    URN_REMOTE_CONTROL,
)
from .encryption import (
    SessionKeys,
    decrypt_payload,
    derive_pairing_keys,
    derive_session_keys,
    encrypt_payload,
)
from .exceptions import (
    AuthenticationFailed,
    InvalidArgument,
    ProtocolError,
    TransportError,
    TransportTimeout,
)

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class VieraEndpoint:
    """Address and optional credentials of one TV."""

    host: str
    port: int = DEFAULT_PORT
    app_id: Optional[str] = None
    encryption_key: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.host, str):
            raise InvalidArgument(f"Invalid IP address: {self.host!r}")
        try:
            ipaddress.IPv4Address(self.host)
        except ValueError as err:
            raise InvalidArgument(f"Invalid IP address: {self.host!r}") from err
        if bool(self.app_id) != bool(self.encryption_key):
            raise InvalidArgument("app_id and encryption_key must be given together")

    @property
    def encrypted(self) -> bool:
        return bool(self.app_id and self.encryption_key)


class VieraSoapClient:
    """Transport client for the Viera SOAP API, one instance per TV.

    Legacy TVs accept plain SOAP requests. When the endpoint carries an app id
    and encryption key, ``async_connect`` must complete the session handshake
    before any command is sent; every command is then wrapped in an
    ``X_EncryptedCommand`` carrying the session id and a sequence number.
    """

    def __init__(
        self,
        endpoint: VieraEndpoint,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.connected = False
        self._session = session
        self._owns_session = session is None

        # Encrypted session context
        self._keys: Optional[SessionKeys] = None
        self._session_id: Optional[str] = None
        self._session_seq_num = 0

        # Pairing challenge from X_DisplayPinCode
        self._challenge: Optional[str] = None

    @property
    def host(self) -> str:
        return self.endpoint.host

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    # ------------------------- session -------------------------

    async def _session_get(self) -> aiohttp.ClientSession:
        """Return an aiohttp session, creating it if needed."""
        if not self._session or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def async_close(self) -> None:
        """Close the HTTP session cleanly."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def async_connect(self) -> None:
        """Establish the session context with the TV.

        Legacy mode needs no handshake. Encrypted mode derives the session
        keys and requests a session id; a rejected handshake raises
        AuthenticationFailed and leaves the client disconnected.
        """
        self.connected = False
        self._session_id = None

        if not self.endpoint.encrypted:
            self.connected = True
            return

        keys = derive_session_keys(self.endpoint.encryption_key)
        app_id = escape(self.endpoint.app_id)
        encinfo = encrypt_payload(f"<X_ApplicationId>{app_id}</X_ApplicationId>", keys)
        request = nrc_request(
            ACTION_GET_SESSION_ID,
            f"<X_ApplicationId>{app_id}</X_ApplicationId><X_EncInfo>{encinfo}</X_EncInfo>",
        )

        _LOGGER.debug("Requesting encrypted session from %s", self.host)
        try:
            text = await self._post(request)
            decrypted = decrypt_payload(parsers.find_field(text, "X_EncResult"), keys)
            session_id, seq_num = parsers.parse_session(decrypted)
        except ProtocolError as err:
            raise AuthenticationFailed(f"Session handshake rejected by {self.host}: {err}") from err

        self._keys = keys
        self._session_id = session_id
        self._session_seq_num = seq_num
        self.connected = True
        _LOGGER.debug("Encrypted session established with %s (id=%s)", self.host, session_id)

    # ------------------------- low-level requests --------------

    async def _post(self, request: SoapRequest) -> str:
        """POST a SOAP request and return the full response body."""
        url = SOAP_BASE_URL.format(host=self.endpoint.host, port=self.endpoint.port, path=request.path)
        session = await self._session_get()
        try:
            _LOGGER.debug("SOAP %s → %s → envelope:\n%s", request.action, url, request.envelope)
            async with session.post(
                url,
                data=request.body,
                headers=request.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                text = await resp.text()
                status = resp.status
        except asyncio.TimeoutError as err:
            _LOGGER.debug("SOAP %s timed out after %ss", request.action, self.timeout)
            raise TransportTimeout(
                f"{request.action} to {self.host} timed out after {self.timeout}s"
            ) from err
        except aiohttp.ClientError as err:
            _LOGGER.debug("SOAP %s network error: %s", request.action, err)
            raise TransportError(f"{request.action} to {self.host} failed: {err}") from err
        except UnicodeDecodeError as err:
            raise ProtocolError(f"{request.action} response is not valid text") from err

        if not 200 <= status < 300:
            error_code, description = parsers.parse_upnp_error(text)
            _LOGGER.debug("SOAP %s failed (%s): %s", request.action, status, text)
            raise ProtocolError(
                f"{request.action} failed with HTTP {status}"
                + (f" (UPnP error {error_code}: {description})" if error_code else ""),
                status=status,
                error_code=error_code,
            )

        _LOGGER.debug("SOAP %s response:\n%s", request.action, text)
        return text

    async def _send(self, request: SoapRequest) -> str:
        """Send a request, wrapping network control in the encrypted session if required.

        Rendering control requests are never encrypted and keep their own
        endpoint, but still need an established session in encrypted mode.
        """
        if not self.endpoint.encrypted:
            return await self._post(request)

        if self._keys is None or self._session_id is None:
            raise AuthenticationFailed(f"No encrypted session with {self.host}; connect first")

        if request.urn != URN_REMOTE_CONTROL:
            return await self._post(request)

        self._session_seq_num += 1
        original = (
            f"<X_SessionId>{self._session_id}</X_SessionId>"
            f"<X_SequenceNumber>{self._session_seq_num:08d}</X_SequenceNumber>"
            f"<X_OriginalCommand>{request.action_element}</X_OriginalCommand>"
        )
        wrapped = nrc_request(
            ACTION_ENCRYPTED_COMMAND,
            f"<X_ApplicationId>{escape(self.endpoint.app_id)}</X_ApplicationId>"
            f"<X_EncInfo>{encrypt_payload(original, self._keys)}</X_EncInfo>",
        )
        _LOGGER.debug("Sending %s as encrypted command #%s", request.action, self._session_seq_num)
        text = await self._post(wrapped)
        return decrypt_payload(parsers.find_field(text, "X_EncResult"), self._keys)

    async def _execute(self, command: Command, *, retries: int = 0) -> str:
        """Encode and send a command, retrying transport errors up to retries times."""
        request = encode(command)
        attempt = 0
        while True:
            try:
                return await self._send(request)
            except TransportError as err:
                if attempt >= retries:
                    raise
                attempt += 1
                _LOGGER.debug("Retrying %s (%s/%s) after: %s", request.action, attempt, retries, err)

    # ------------------------- commands -------------------------

    async def async_send_key(self, key: str) -> None:
        """Press a remote control key."""
        await self._execute(KeyCommand(key))

    async def async_get_volume(self, *, retries: int = 0) -> int:
        """Return the current volume."""
        return parsers.parse_volume(await self._execute(GetVolume(), retries=retries))

    async def async_set_volume(self, volume: int) -> None:
        """Set the volume in range from 0 to 100."""
        await self._execute(SetVolume(volume))

    async def async_get_mute(self, *, retries: int = 0) -> bool:
        """Return the current mute setting."""
        return parsers.parse_mute(await self._execute(GetMute(), retries=retries))

    async def async_set_mute(self, mute: bool) -> None:
        """Turn mute on or off."""
        await self._execute(SetMute(bool(mute)))

    # ------------------------- pairing -------------------------

    async def async_request_pin_code(self, device_name: str) -> None:
        """Ask the TV to display a PIN code for pairing."""
        _LOGGER.debug("Requesting PIN code from %s for %s", self.host, device_name)
        request = nrc_request(
            ACTION_DISPLAY_PIN_CODE,
            f"<X_DeviceName>{escape(device_name)}</X_DeviceName>",
        )
        try:
            text = await self._post(request)
            self._challenge = parsers.find_field(text, "X_ChallengeKey")
        except ProtocolError as err:
            raise AuthenticationFailed(f"{self.host} refused to display a PIN code: {err}") from err

    async def async_authorize_pin_code(self, pincode: str) -> tuple[str, str]:
        """Send the PIN shown on screen; return (app id, encryption key)."""
        if self._challenge is None:
            raise AuthenticationFailed("No PIN code was requested")

        keys = derive_pairing_keys(self._challenge)
        authinfo = encrypt_payload(f"<X_PinCode>{escape(pincode)}</X_PinCode>", keys)
        request = nrc_request(ACTION_REQUEST_AUTH, f"<X_AuthInfo>{authinfo}</X_AuthInfo>")
        try:
            text = await self._post(request)
            decrypted = decrypt_payload(parsers.find_field(text, "X_AuthResult"), keys)
            app_id, encryption_key = parsers.parse_auth_result(decrypted)
        except ProtocolError as err:
            raise AuthenticationFailed(f"PIN code rejected by {self.host}: {err}") from err

        self._challenge = None
        _LOGGER.debug("Paired with %s (app_id=%s)", self.host, app_id)
        return app_id, encryption_key
