from dataclasses import dataclass
from typing import Optional, Tuple

from solana_pay.core.domain.value_objects import Number, PublicKey


@dataclass(frozen=True)
class SolanaPayUrl:
    """
    Parsed transfer request.

    `amount` is in user units (SOL, not lamports). Without `spl_token` the request
    is a native SOL transfer. `references` keep URL order and duplicates.
    """
    recipient: PublicKey
    amount: Optional[Number] = None
    spl_token: Optional[PublicKey] = None
    references: Tuple[PublicKey, ...] = ()
    label: Optional[str] = None
    message: Optional[str] = None
    spl_memo: Optional[str] = None

    @property
    def is_native(self) -> bool:
        return self.spl_token is None
