from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Union


class DecimalsLookupError(Exception):
    """Raised by a lookup that cannot resolve the decimals of a mint."""


class IDecimalsLookup(ABC):
    @abstractmethod
    async def get_decimals(self, mint: bytes) -> int:
        """
        Resolve the decimals configured on an SPL token mint.
        `mint` is the 32 raw bytes of the mint address.
        """
        pass


# A plain `async def lookup(mint: bytes) -> int` is accepted wherever a lookup is expected
DecimalsLookupFunc = Callable[[bytes], Awaitable[int]]
DecimalsLookup = Union[IDecimalsLookup, DecimalsLookupFunc]
