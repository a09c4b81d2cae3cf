"""Diagnostics support for Panasonic Viera integration."""

from __future__ import annotations
from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_APP_ID, CONF_ENCRYPTION_KEY, DOMAIN

# Fields that should never be exposed in plain text
TO_REDACT: set[str] = {
    CONF_APP_ID,
    CONF_ENCRYPTION_KEY,
    "session_id",
}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator = hass.data[DOMAIN][entry.entry_id]
    session = coordinator.device.session

    data: dict[str, Any] = {
        "entry": entry.as_dict(),
        "coordinator": {
            "host": coordinator.endpoint.host,
            "port": coordinator.endpoint.port,
            "encrypted": coordinator.endpoint.encrypted,
            "session_id": coordinator.soap.session_id,
        },
        "session": {
            "state": session.state.value,
            "connected": session.connected,
            "last_known_alive": session.last_known_alive,
            "tv_on": session.tv_on,
            "last_volume": session.last_volume,
            "last_mute": session.last_mute,
        },
        "status": coordinator.data,
    }

    return async_redact_data(data, TO_REDACT)
