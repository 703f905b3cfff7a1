"""Exceptions a JSON-RPC round trip can raise through `AsyncWeb3`."""

from __future__ import annotations

import asyncio

import aiohttp
from web3.exceptions import Web3Exception

# AsyncHTTPProvider re-raises aiohttp errors (HTTP 5xx, bad payloads) unchanged.
PROVIDER_ERRORS = (
    Web3Exception,
    aiohttp.ClientError,
    asyncio.TimeoutError,
    ValueError,
    OSError,
)
