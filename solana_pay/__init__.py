"""Parse and build Solana Pay transfer-request URLs."""

from solana_pay.core.domain.constants import NATIVE_SOL_DECIMALS, SOLANA_SCHEME
from solana_pay.core.domain.entities import SolanaPayUrl
from solana_pay.core.domain.exceptions import (
    ExcessPrecision,
    InvalidAddressEncoding,
    InvalidAddressLength,
    InvalidQueryParam,
    InvalidScheme,
    InvalidUrlEncoding,
    MalformedNumber,
    MissingRecipient,
    PrecisionLookupFailed,
    RecipientNotOnCurve,
    RecipientOnCurve,
    SolanaPayError,
    TooManyReferences,
)
from solana_pay.core.domain.value_objects import CurvePolicy, Number, PublicKey, UiTokenAmount
from solana_pay.core.interfaces.services import DecimalsLookupError, IDecimalsLookup
from solana_pay.core.use_cases.url.build_url import BuildPaymentUrl, BuildPaymentUrlResult, SolanaPayUrlBuilder
from solana_pay.core.use_cases.url.parse_url import (
    ParsePaymentUrl,
    ParsePaymentUrlResult,
    SolanaPayParser,
    parse_url,
)
from solana_pay.infrastructure.services.decimals_lookup import (
    NATIVE_DECIMALS_LOOKUP,
    ConstantDecimalsLookup,
    RpcDecimalsLookup,
)

__all__ = [
    "NATIVE_SOL_DECIMALS",
    "SOLANA_SCHEME",
    "SolanaPayUrl",
    "SolanaPayError",
    "InvalidScheme",
    "MissingRecipient",
    "InvalidAddressEncoding",
    "InvalidAddressLength",
    "MalformedNumber",
    "ExcessPrecision",
    "PrecisionLookupFailed",
    "InvalidUrlEncoding",
    "InvalidQueryParam",
    "TooManyReferences",
    "RecipientNotOnCurve",
    "RecipientOnCurve",
    "CurvePolicy",
    "Number",
    "PublicKey",
    "UiTokenAmount",
    "DecimalsLookupError",
    "IDecimalsLookup",
    "SolanaPayParser",
    "parse_url",
    "ParsePaymentUrl",
    "ParsePaymentUrlResult",
    "SolanaPayUrlBuilder",
    "BuildPaymentUrl",
    "BuildPaymentUrlResult",
    "NATIVE_DECIMALS_LOOKUP",
    "ConstantDecimalsLookup",
    "RpcDecimalsLookup",
]
