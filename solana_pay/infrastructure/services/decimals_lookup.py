import asyncio
from typing import Any, Optional

import aiohttp
from loguru import logger

from solana_pay.core.domain.constants import MAX_MINT_DECIMALS, NATIVE_SOL_DECIMALS
from solana_pay.core.domain.value_objects import PublicKey
from solana_pay.core.interfaces.services import DecimalsLookupError, IDecimalsLookup
from solana_pay.other.config_reader import config

TOKEN_PROGRAMS = ("spl-token", "spl-token-2022")


class ConstantDecimalsLookup(IDecimalsLookup):
    """Answers every mint with the same decimals, without any network call."""

    def __init__(self, decimals: int):
        if not 0 <= decimals <= MAX_MINT_DECIMALS:
            raise ValueError(f"decimals must be within 0..{MAX_MINT_DECIMALS}, got {decimals}")
        self.decimals = decimals

    async def get_decimals(self, mint: bytes) -> int:
        return self.decimals


NATIVE_DECIMALS_LOOKUP = ConstantDecimalsLookup(NATIVE_SOL_DECIMALS)


class RpcDecimalsLookup(IDecimalsLookup):
    """
    Reads the decimals of a mint through the `getAccountInfo` JSON-RPC method.

    The node is asked for `jsonParsed` encoding, so the mint layout is decoded
    server side. Each call opens its own session; timeouts come from
    `rpc_timeout` in the settings unless given explicitly.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        timeout: Optional[float] = None,
        commitment: Optional[str] = None,
        token: Optional[str] = None,
    ):
        self.rpc_url = rpc_url or config.rpc_url
        self.timeout = timeout if timeout is not None else config.rpc_timeout
        self.commitment = commitment or config.rpc_commitment
        if token is None and config.rpc_token is not None:
            token = config.rpc_token.get_secret_value()
        self.token = token

    async def get_decimals(self, mint: bytes) -> int:
        address = PublicKey.from_bytes(mint).to_base58()
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getAccountInfo",
            "params": [address, {"encoding": "jsonParsed", "commitment": self.commitment}],
        }
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        logger.debug(f"Fetching decimals for mint {address} from {self.rpc_url}")
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.rpc_url, json=payload, headers=headers) as resp:
                    if resp.status != 200:
                        text = await resp.text()
                        logger.error(f"getAccountInfo for {address} failed: {resp.status} {text}")
                        raise DecimalsLookupError(f"RPC returned HTTP {resp.status}")
                    try:
                        data = await resp.json(content_type=None)
                    except ValueError as e:
                        logger.error(f"getAccountInfo for {address} returned a non-JSON body")
                        raise DecimalsLookupError("RPC returned a non-JSON body") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"getAccountInfo for {address} failed: {e!r}")
            raise DecimalsLookupError(f"RPC request failed: {e!r}") from e

        decimals = self._extract_decimals(address, data)
        logger.debug(f"Mint {address} has {decimals} decimals")
        return decimals

    @staticmethod
    def _extract_decimals(address: str, data: Any) -> int:
        if not isinstance(data, dict):
            raise DecimalsLookupError(f"RPC returned {type(data).__name__} instead of a JSON object")
        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            raise DecimalsLookupError(f"RPC error: {message}")

        result = data.get("result")
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, dict):
            raise DecimalsLookupError(f"Account {address} not found")

        # unparseable accounts come back as [base64, "base64"]
        account_data = value.get("data")
        if not isinstance(account_data, dict) or account_data.get("program") not in TOKEN_PROGRAMS:
            raise DecimalsLookupError(f"Account {address} is not owned by a token program")

        parsed = account_data.get("parsed")
        if not isinstance(parsed, dict) or parsed.get("type") != "mint":
            raise DecimalsLookupError(f"Account {address} is not a token mint")

        info = parsed.get("info")
        decimals = info.get("decimals") if isinstance(info, dict) else None
        if isinstance(decimals, bool) or not isinstance(decimals, int):
            raise DecimalsLookupError(f"Mint {address} has no decimals field")
        return decimals
