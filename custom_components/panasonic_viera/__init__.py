"""Panasonic Viera integration for Home Assistant."""
from __future__ import annotations

import logging
from typing import Any, Iterable

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall

from .const import (
    CONF_APP_ID,
    CONF_ENCRYPTION_KEY,
    CONF_HOST,
    CONF_NAME,
    DEFAULT_NAME,
    DOMAIN,
    PLATFORMS,
)
from .coordinator import VieraCoordinator
from .soap import VieraEndpoint

_LOGGER = logging.getLogger(__name__)

SERVICE_SEND_KEY = "send_key"
SERVICE_SEND_COMMAND = "send_command"
ATTR_KEY = "key"
ATTR_COMMAND = "command"
ATTR_VALUE = "value"


async def async_send_to_tvs(
    coordinators: Iterable[VieraCoordinator],
    name: str,
    value: Any = None,
    host: str | None = None,
) -> bool:
    """Run a named command on every TV, or only on host; True if all succeeded."""
    ok = True
    for coordinator in coordinators:
        if not host or host == coordinator.endpoint.host:
            ok = await coordinator.async_send_command(name, value) and ok
    return ok


async def async_setup(hass: HomeAssistant, config: dict) -> bool:
    """Set up Panasonic Viera integration (YAML not supported)."""
    hass.data.setdefault(DOMAIN, {})

    async def handle_send_key(call: ServiceCall) -> None:
        """Press a remote key on every TV, or only on the given host."""
        target_host = call.data.get(CONF_HOST)
        coordinator: VieraCoordinator
        for coordinator in hass.data[DOMAIN].values():
            if not target_host or target_host == coordinator.endpoint.host:
                await coordinator.async_send_key(call.data[ATTR_KEY])

    async def handle_send_command(call: ServiceCall) -> None:
        """Run a named command (mute, volume, get_volume, get_mute or a key)."""
        await async_send_to_tvs(
            hass.data[DOMAIN].values(),
            call.data[ATTR_COMMAND],
            call.data.get(ATTR_VALUE),
            call.data.get(CONF_HOST),
        )

    hass.services.async_register(DOMAIN, SERVICE_SEND_KEY, handle_send_key)
    hass.services.async_register(DOMAIN, SERVICE_SEND_COMMAND, handle_send_command)
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Panasonic Viera TV from a config entry."""
    endpoint = VieraEndpoint(
        entry.data[CONF_HOST],
        app_id=entry.data.get(CONF_APP_ID),
        encryption_key=entry.data.get(CONF_ENCRYPTION_KEY),
    )

    _LOGGER.debug(
        "async_setup_entry: host=%s encrypted=%s",
        endpoint.host, endpoint.encrypted,
    )

    coordinator = VieraCoordinator(
        hass,
        endpoint,
        name=entry.data.get(CONF_NAME) or entry.title or DEFAULT_NAME,
        entry=entry,
    )

    # First liveness cycle; a TV that is off still sets up fine
    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coordinator

    # Forward setups to supported platforms
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a Panasonic Viera config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        coordinator: VieraCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
        await coordinator.async_close()
    return unload_ok
