from contextlib import asynccontextmanager
from urllib.parse import urlparse

from aiohttp import ClientTimeout
from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3

from node_staking.core.constants.base import DEFAULT_RPC_TIMEOUT
from node_staking.core.errors import StakingPreconditionError

_SUPPORTED_RPC_SCHEMES = {"http", "https"}


def validate_rpc_url(rpc_url: str | None) -> str:
    url = str(rpc_url or "").strip()
    if not url:
        raise StakingPreconditionError("Invalid RPC URL: endpoint not configured")
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise StakingPreconditionError(f"Invalid RPC URL: {exc}") from exc
    if parsed.scheme not in _SUPPORTED_RPC_SCHEMES:
        raise StakingPreconditionError(
            f"Invalid RPC URL: unsupported scheme {parsed.scheme or '<none>'!r}"
        )
    if not parsed.hostname:
        raise StakingPreconditionError(f"Invalid RPC URL: missing host in {url!r}")
    return url


def _get_web3(rpc: str, timeout: float = DEFAULT_RPC_TIMEOUT) -> AsyncWeb3:
    try:
        provider = AsyncHTTPProvider(
            rpc,
            request_kwargs={
                "headers": AsyncHTTPProvider.get_request_headers(),
                "timeout": ClientTimeout(total=timeout),
            },
        )
    except Exception as exc:
        raise StakingPreconditionError(f"Failed to create provider: {exc}") from exc
    return AsyncWeb3(provider)


@asynccontextmanager
async def web3_from_rpc_url(rpc_url: str, *, timeout: float = DEFAULT_RPC_TIMEOUT):
    """Yield a fresh AsyncWeb3 bound to ``rpc_url``; the session is closed on exit."""
    web3 = _get_web3(validate_rpc_url(rpc_url), timeout)
    try:
        yield web3
    finally:
        try:
            await web3.provider.disconnect()
        except Exception as exc:
            logger.debug(f"Ignoring provider disconnect error for {rpc_url}: {exc}")
