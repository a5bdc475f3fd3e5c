import urllib.parse
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Tuple

from loguru import logger

from solana_pay.core.domain.constants import (
    MAX_MINT_DECIMALS,
    MAX_REFERENCES,
    NATIVE_SOL_DECIMALS,
    QUERY_AMOUNT,
    QUERY_LABEL,
    QUERY_MEMO,
    QUERY_MESSAGE,
    QUERY_REFERENCE,
    QUERY_SPL_TOKEN,
    SOLANA_SCHEME,
)
from solana_pay.core.domain.entities import SolanaPayUrl
from solana_pay.core.domain.exceptions import (
    InvalidQueryParam,
    InvalidScheme,
    InvalidUrlEncoding,
    MissingRecipient,
    PrecisionLookupFailed,
    SolanaPayError,
    TooManyReferences,
)
from solana_pay.core.domain.value_objects import CurvePolicy, Number, PublicKey, UiTokenAmount
from solana_pay.core.interfaces.services import DecimalsLookup, IDecimalsLookup

_SINGLE_VALUE_KEYS = frozenset({QUERY_AMOUNT, QUERY_SPL_TOKEN, QUERY_LABEL, QUERY_MESSAGE, QUERY_MEMO})


def _unquote(text: str, plus_as_space: bool = True) -> str:
    unquote = urllib.parse.unquote_plus if plus_as_space else urllib.parse.unquote
    try:
        return unquote(text, errors="strict")
    except UnicodeDecodeError:
        raise InvalidUrlEncoding(text) from None


def split_query(query: str) -> List[Tuple[str, str]]:
    """Decoded `(key, value)` pairs in URL order. `+` decodes to a space."""
    pairs = []
    for segment in query.split("&"):
        if not segment:
            continue
        key, sep, value = segment.partition("=")
        if not sep:
            raise InvalidQueryParam(segment)
        pairs.append((_unquote(key), _unquote(value)))
    return pairs


class ParsedPayment(NamedTuple):
    url: SolanaPayUrl
    # None when the URL carries no amount
    decimals: Optional[int]


class SolanaPayParser:
    """
    Parses `solana:` transfer-request URLs.

    Holds no state besides the recipient curve policy, so one instance can
    serve any number of concurrent `parse` calls.
    """

    def __init__(self, curve_policy: CurvePolicy = CurvePolicy.ANY):
        self.curve_policy = curve_policy

    async def parse(self, url: str, lookup: DecimalsLookup) -> SolanaPayUrl:
        parsed = await self.parse_with_decimals(url, lookup)
        return parsed.url

    async def parse_with_decimals(self, url: str, lookup: DecimalsLookup) -> ParsedPayment:
        if not url.startswith(SOLANA_SCHEME):
            raise InvalidScheme(url)

        path, _, query = url[len(SOLANA_SCHEME):].partition("?")
        recipient_text = _unquote(path, plus_as_space=False)
        if not recipient_text:
            raise MissingRecipient()
        recipient = self.curve_policy.check(PublicKey.from_base58(recipient_text))

        fields: Dict[str, str] = {}
        references: List[PublicKey] = []
        for key, value in split_query(query):
            if key == QUERY_REFERENCE:
                references.append(PublicKey.from_base58(value))
                if len(references) > MAX_REFERENCES:
                    raise TooManyReferences(len(references), MAX_REFERENCES)
            elif key in _SINGLE_VALUE_KEYS:
                # last occurrence wins
                fields[key] = value

        amount = Number.parse(fields[QUERY_AMOUNT]) if QUERY_AMOUNT in fields else None
        spl_token = PublicKey.from_base58(fields[QUERY_SPL_TOKEN]) if QUERY_SPL_TOKEN in fields else None

        decimals = None
        if amount is not None:
            decimals = await self._resolve_decimals(spl_token, lookup)
            amount.validate_precision(decimals)

        payment = SolanaPayUrl(
            recipient=recipient,
            amount=amount,
            spl_token=spl_token,
            references=tuple(references),
            label=fields.get(QUERY_LABEL),
            message=fields.get(QUERY_MESSAGE),
            spl_memo=fields.get(QUERY_MEMO),
        )
        return ParsedPayment(payment, decimals)

    @staticmethod
    async def _resolve_decimals(spl_token: Optional[PublicKey], lookup: DecimalsLookup) -> int:
        if spl_token is None:
            return NATIVE_SOL_DECIMALS

        get_decimals = lookup.get_decimals if isinstance(lookup, IDecimalsLookup) else lookup
        # asyncio.CancelledError is not an Exception and propagates as is
        try:
            decimals = await get_decimals(spl_token.to_bytes())
        except Exception as e:
            raise PrecisionLookupFailed(spl_token.to_base58(), str(e) or type(e).__name__) from e

        if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= MAX_MINT_DECIMALS:
            raise PrecisionLookupFailed(spl_token.to_base58(), f"invalid decimals value {decimals!r}")
        return decimals


async def parse_url(url: str, lookup: DecimalsLookup) -> SolanaPayUrl:
    return await SolanaPayParser().parse(url, lookup)


@dataclass(frozen=True)
class ParsePaymentUrlResult:
    success: bool
    url: Optional[SolanaPayUrl] = None
    token_amount: Optional[UiTokenAmount] = None
    error: Optional[SolanaPayError] = None
    error_message: Optional[str] = None


class ParsePaymentUrl:
    def __init__(self, lookup: DecimalsLookup, parser: Optional[SolanaPayParser] = None):
        self.lookup = lookup
        self.parser = parser or SolanaPayParser()

    async def execute(self, url: str) -> ParsePaymentUrlResult:
        try:
            parsed = await self.parser.parse_with_decimals(url, self.lookup)
        except SolanaPayError as e:
            logger.warning(f"Solana Pay URL rejected ({type(e).__name__}): {e}")
            return ParsePaymentUrlResult(success=False, error=e, error_message=str(e))

        payment = parsed.url
        token_amount = None
        if payment.amount is not None:
            token_amount = UiTokenAmount.from_number(payment.amount, parsed.decimals)

        logger.debug(f"Parsed Solana Pay URL for {payment.recipient}, amount={payment.amount}, "
                     f"spl_token={payment.spl_token}, references={len(payment.references)}")
        return ParsePaymentUrlResult(success=True, url=payment, token_amount=token_amount)
