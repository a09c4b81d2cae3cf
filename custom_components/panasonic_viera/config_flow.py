"""Config flow for Panasonic Viera integration."""

from __future__ import annotations

import logging
from typing import Any, Optional

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.data_entry_flow import FlowResult

from .const import (
    CONF_APP_ID,
    CONF_ENCRYPTION_KEY,
    CONF_HOST,
    CONF_NAME,
    CONF_PAIR,
    CONF_PIN,
    DEFAULT_NAME,
    DOMAIN,
)
from .exceptions import AuthenticationFailed, InvalidArgument, TransportError, VieraError
from .soap import VieraEndpoint, VieraSoapClient

_LOGGER = logging.getLogger(__name__)

PAIRING_DEVICE_NAME = "Home Assistant"

DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST): str,
        vol.Optional(CONF_NAME, default=DEFAULT_NAME): str,
        vol.Optional(CONF_PAIR, default=False): bool,
        vol.Optional(CONF_APP_ID): str,
        vol.Optional(CONF_ENCRYPTION_KEY): str,
    }
)

PIN_SCHEMA = vol.Schema({vol.Required(CONF_PIN): str})


class VieraConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Panasonic Viera TVs."""

    VERSION = 1

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._client: Optional[VieraSoapClient] = None

    async def _async_validate(self, endpoint: VieraEndpoint) -> Optional[str]:
        """Connect and query the TV once; return an error key or None."""
        client = VieraSoapClient(endpoint)
        try:
            await client.async_connect()
            await client.async_get_mute()
        except AuthenticationFailed as err:
            _LOGGER.error("Authentication with %s failed: %s", endpoint.host, err)
            return "invalid_auth"
        except TransportError as err:
            _LOGGER.error("Unable to reach %s: %s", endpoint.host, err)
            return "cannot_connect"
        except VieraError as err:
            _LOGGER.error("Unexpected response from %s: %s", endpoint.host, err)
            return "cannot_connect"
        finally:
            await client.async_close()
        return None

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        errors: dict[str, str] = {}

        if user_input is None:
            return self.async_show_form(step_id="user", data_schema=DATA_SCHEMA, errors=errors)

        host = user_input[CONF_HOST].strip()
        app_id = (user_input.get(CONF_APP_ID) or "").strip() or None
        encryption_key = (user_input.get(CONF_ENCRYPTION_KEY) or "").strip() or None

        try:
            endpoint = VieraEndpoint(host, app_id=app_id, encryption_key=encryption_key)
        except InvalidArgument as err:
            _LOGGER.error("Invalid configuration for %s: %s", host, err)
            errors["base"] = "invalid_host" if app_id is None and encryption_key is None else "invalid_auth"
            return self.async_show_form(step_id="user", data_schema=DATA_SCHEMA, errors=errors)

        # Avoid duplicates
        await self.async_set_unique_id(f"{DOMAIN}-{host}")
        self._abort_if_unique_id_configured()

        self._data = {
            CONF_HOST: host,
            CONF_NAME: user_input.get(CONF_NAME) or DEFAULT_NAME,
        }

        if user_input.get(CONF_PAIR):
            self._client = VieraSoapClient(endpoint)
            try:
                await self._client.async_request_pin_code(PAIRING_DEVICE_NAME)
            except VieraError as err:
                _LOGGER.error("Requesting PIN code from %s failed: %s", host, err)
                await self._client.async_close()
                self._client = None
                errors["base"] = "cannot_connect" if isinstance(err, TransportError) else "invalid_auth"
                return self.async_show_form(step_id="user", data_schema=DATA_SCHEMA, errors=errors)
            return await self.async_step_pair()

        if error := await self._async_validate(endpoint):
            errors["base"] = error
            return self.async_show_form(step_id="user", data_schema=DATA_SCHEMA, errors=errors)

        if endpoint.encrypted:
            self._data[CONF_APP_ID] = app_id
            self._data[CONF_ENCRYPTION_KEY] = encryption_key

        return self.async_create_entry(title=self._data[CONF_NAME], data=self._data)

    async def async_step_pair(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Enter the PIN code shown on the TV."""
        errors: dict[str, str] = {}

        if user_input is None or self._client is None:
            return self.async_show_form(step_id="pair", data_schema=PIN_SCHEMA, errors=errors)

        try:
            app_id, encryption_key = await self._client.async_authorize_pin_code(
                user_input[CONF_PIN].strip()
            )
        except AuthenticationFailed as err:
            # The challenge stays valid, so the user can retry the PIN
            _LOGGER.error("Pairing failed: %s", err)
            errors["base"] = "invalid_pin_code"
            return self.async_show_form(step_id="pair", data_schema=PIN_SCHEMA, errors=errors)
        except VieraError as err:
            _LOGGER.error("Pairing failed: %s", err)
            errors["base"] = "cannot_connect"
            return self.async_show_form(step_id="pair", data_schema=PIN_SCHEMA, errors=errors)

        await self._client.async_close()
        _LOGGER.debug("Pairing success: host=%s app_id=%s", self._data[CONF_HOST], app_id)
        self._data[CONF_APP_ID] = app_id
        self._data[CONF_ENCRYPTION_KEY] = encryption_key
        return self.async_create_entry(title=self._data[CONF_NAME], data=self._data)
