"""Tests for subsweep.utils.http_client."""

from __future__ import annotations

import asyncio

import aiohttp
import pytest

from subsweep.utils.http_client import HTTP_ERRORS, AsyncHTTPClient


def test_http_errors_cover_client_and_timeout():
    assert aiohttp.ClientError in HTTP_ERRORS
    assert asyncio.TimeoutError in HTTP_ERRORS


def test_defaults():
    client = AsyncHTTPClient()
    assert client._timeout == 9.0
    assert client._verify_ssl is False
    assert client._user_agents


@pytest.mark.asyncio
async def test_session_lifecycle():
    async with AsyncHTTPClient(timeout=1) as client:
        session = client._session
        assert session is not None
        assert not session.closed
    assert session.closed


@pytest.mark.asyncio
async def test_unreachable_host_raises_client_error():
    async with AsyncHTTPClient(timeout=2) as client:
        with pytest.raises(HTTP_ERRORS):
            await client.get("http://127.0.0.1:9/")
