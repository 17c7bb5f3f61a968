"""Resilient Chain Client — read-only JSON-RPC balance lookup with retry, backoff, and error mapping.

Invariants:
    - Every request carries an explicit timeout (never hangs a request forever)
    - Transient errors (timeouts, connection, 5xx): bounded retries with exponential backoff
    - Client errors (4xx) and JSON-RPC error objects: immediate failure, no retry
    - All failures mapped to UpstreamUnavailableError (core/errors.py)

Design Decisions:
    - Plain httpx JSON-RPC over a full web3 stack: the service needs one read-only call
    - ±25% jitter on backoff: prevents thundering herd on shared public endpoints
    - Transport injectable: tests pass httpx.MockTransport instead of patching
"""

import asyncio
import itertools
import logging
import random
from decimal import Decimal

import httpx

from marketplace.core.errors import ErrorContext, UpstreamUnavailableError
from marketplace.core.pricing import wei_to_ether

logger = logging.getLogger(__name__)

_request_ids = itertools.count(1)


class ChainBalanceClient:
    """Fetches native-token balances over Ethereum JSON-RPC (eth_getBalance)."""

    def __init__(
        self,
        rpc_url: str,
        timeout_seconds: float = 10.0,
        max_retries: int = 2,
        base_delay_ms: int = 250,
        max_delay_ms: int = 5_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.rpc_url = rpc_url
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_balance(self, address: str) -> Decimal:
        """Return the latest balance of `address` in ether, rounded to 4 places."""
        if not address:
            raise UpstreamUnavailableError(
                "Wallet address is required", "invalid_request",
            )
        context = ErrorContext(address=address)
        result = await self._call("eth_getBalance", [address, "latest"], context)
        try:
            wei = int(result, 16)
        except (TypeError, ValueError):
            raise UpstreamUnavailableError(
                f"Unparseable balance {result!r}", "bad_response", context,
            )
        return wei_to_ether(wei)

    async def _call(
        self, method: str, params: list, context: ErrorContext,
    ) -> object:
        payload = {
            "jsonrpc": "2.0",
            "id": next(_request_ids),
            "method": method,
            "params": params,
        }
        for attempt in range(self.max_retries + 1):
            try:
                response = await self._client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                body = response.json()
            except httpx.TimeoutException as e:
                await self._handle_transient_error(e, "timeout", attempt, context)
                continue
            except httpx.TransportError as e:
                await self._handle_transient_error(
                    e, "connection_error", attempt, context,
                )
                continue
            except httpx.HTTPStatusError as e:
                if e.response.status_code >= 500:
                    await self._handle_transient_error(
                        e, "server_error", attempt, context,
                    )
                    continue
                raise UpstreamUnavailableError(
                    f"HTTP {e.response.status_code}", "client_error", context,
                )
            except ValueError as e:
                raise UpstreamUnavailableError(
                    f"Invalid JSON: {e}", "bad_response", context,
                )

            if not isinstance(body, dict):
                raise UpstreamUnavailableError(
                    "Malformed JSON-RPC envelope", "bad_response", context,
                )
            if body.get("error"):
                raise UpstreamUnavailableError(
                    str(body["error"].get("message", body["error"]))
                    if isinstance(body["error"], dict) else str(body["error"]),
                    "rpc_error",
                    context,
                )
            logger.debug(
                f"JSON-RPC {method} succeeded",
                extra={"attempt": attempt + 1, "address": context.address},
            )
            return body.get("result")

        # Loop always returns or raises; kept for type checkers
        raise UpstreamUnavailableError("Retries exhausted", "connection_error", context)

    async def _handle_transient_error(
        self, e: Exception, reason: str, attempt: int, context: ErrorContext,
    ) -> None:
        """Sleep before the next attempt, or raise when retries are exhausted."""
        if attempt >= self.max_retries:
            raise UpstreamUnavailableError(
                f"Transient failure after {self.max_retries} retries: {e}",
                reason,
                context,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"Chain RPC {reason}, retry after {delay}ms: {e}",
            extra={"attempt": attempt + 1, "address": context.address},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311
