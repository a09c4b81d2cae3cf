"""pytest fixtures"""

import aiohttp
import pytest
import pytest_asyncio
from aioresponses import aioresponses

from custom_components.panasonic_viera.soap import VieraEndpoint, VieraSoapClient

from utils_viera import APP_ID, ENCRYPTION_KEY, TV_HOST


@pytest.fixture
def endpoint():
    """legacy (unencrypted) endpoint"""
    return VieraEndpoint(TV_HOST)


@pytest.fixture
def encrypted_endpoint():
    """endpoint with pairing credentials"""
    return VieraEndpoint(TV_HOST, app_id=APP_ID, encryption_key=ENCRYPTION_KEY)


@pytest.fixture
def mock_tv():
    """aiohttp request mock"""
    with aioresponses() as mock:
        yield mock


@pytest_asyncio.fixture
async def client(endpoint):  # pylint: disable=redefined-outer-name
    """legacy client with a real aiohttp session"""
    session = aiohttp.ClientSession()
    yield VieraSoapClient(endpoint, session=session)
    await session.close()


@pytest_asyncio.fixture
async def encrypted_client(encrypted_endpoint):  # pylint: disable=redefined-outer-name
    """encrypted client with a real aiohttp session"""
    session = aiohttp.ClientSession()
    yield VieraSoapClient(encrypted_endpoint, session=session)
    await session.close()
