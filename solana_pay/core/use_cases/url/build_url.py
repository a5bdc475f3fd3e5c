import urllib.parse
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Tuple, Union

from loguru import logger

from solana_pay.core.domain.constants import (
    MAX_REFERENCES,
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
    InvalidUrlEncoding,
    MalformedNumber,
    MissingRecipient,
    SolanaPayError,
    TooManyReferences,
)
from solana_pay.core.domain.value_objects import CurvePolicy, Number, PublicKey

AmountLike = Union[str, int, Decimal, Number]


def _to_number(amount: AmountLike) -> Number:
    if isinstance(amount, Number):
        return amount
    if isinstance(amount, Decimal):
        return Number.from_decimal(amount)
    if isinstance(amount, int) and not isinstance(amount, bool):
        return Number.from_parts(amount)
    if isinstance(amount, str):
        return Number.parse(amount)
    raise MalformedNumber(repr(amount), "amount must be a str, int, Decimal or Number")


def _checked_text(value: str) -> str:
    try:
        value.encode("utf-8", errors="strict")
    except UnicodeEncodeError as e:
        raise InvalidUrlEncoding(value) from e
    return value


def _encode_text(value: str) -> str:
    # everything but ALPHA / DIGIT / "-._~" is escaped, a space becomes %20
    return urllib.parse.quote(value, safe="")


@dataclass(frozen=True)
class SolanaPayUrlBuilder:
    """
    Immutable accumulator for a Solana Pay URL.

    Every `add_*` validates its input and returns a new builder; on invalid input
    it raises and the builder it was called on is left as it was:

        url = (SolanaPayUrlBuilder()
               .add_recipient("mvines9iiHiQTysrwkJjGf2gb9Ex9jXJX8ns3qwf2kN")
               .add_amount("1")
               .add_label("Michael")
               .to_url())
    """
    recipient: Optional[PublicKey] = None
    amount: Optional[Number] = None
    spl_token: Optional[PublicKey] = None
    references: Tuple[PublicKey, ...] = ()
    label: Optional[str] = None
    message: Optional[str] = None
    spl_memo: Optional[str] = None

    @classmethod
    def from_descriptor(cls, payment: SolanaPayUrl) -> "SolanaPayUrlBuilder":
        return cls(
            recipient=payment.recipient,
            amount=payment.amount,
            spl_token=payment.spl_token,
            references=tuple(payment.references),
            label=payment.label,
            message=payment.message,
            spl_memo=payment.spl_memo,
        )

    def add_recipient(self, recipient: str, curve_policy: CurvePolicy = CurvePolicy.ANY) -> "SolanaPayUrlBuilder":
        return replace(self, recipient=curve_policy.check(PublicKey.from_base58(recipient)))

    def add_amount(self, amount: AmountLike, max_decimals: Optional[int] = None) -> "SolanaPayUrlBuilder":
        number = _to_number(amount)
        if max_decimals is not None:
            number.validate_precision(max_decimals)
        return replace(self, amount=number)

    def add_spl_token(self, spl_token: str) -> "SolanaPayUrlBuilder":
        return replace(self, spl_token=PublicKey.from_base58(spl_token))

    def add_reference(self, reference: str) -> "SolanaPayUrlBuilder":
        return self.add_reference_multiple([reference])

    def add_reference_multiple(self, references: Iterable[str]) -> "SolanaPayUrlBuilder":
        """All or nothing: one bad address and none of the batch is added."""
        decoded = [PublicKey.from_base58(reference) for reference in references]
        return self._with_references(decoded)

    def add_random_reference(self) -> "SolanaPayUrlBuilder":
        return self._with_references([PublicKey.random()])

    def add_label(self, label: str) -> "SolanaPayUrlBuilder":
        return replace(self, label=_checked_text(label))

    def add_message(self, message: str) -> "SolanaPayUrlBuilder":
        return replace(self, message=_checked_text(message))

    def add_spl_memo(self, spl_memo: str) -> "SolanaPayUrlBuilder":
        return replace(self, spl_memo=_checked_text(spl_memo))

    def _with_references(self, new_references: Sequence[PublicKey]) -> "SolanaPayUrlBuilder":
        total = len(self.references) + len(new_references)
        if total > MAX_REFERENCES:
            raise TooManyReferences(total, MAX_REFERENCES)
        return replace(self, references=self.references + tuple(new_references))

    def build(self) -> SolanaPayUrl:
        if self.recipient is None:
            raise MissingRecipient()
        return SolanaPayUrl(
            recipient=self.recipient,
            amount=self.amount,
            spl_token=self.spl_token,
            references=self.references,
            label=self.label,
            message=self.message,
            spl_memo=self.spl_memo,
        )

    def to_url(self) -> str:
        """Key order: amount, spl-token, reference..., label, message, memo."""
        payment = self.build()

        params = []
        if payment.amount is not None:
            params.append(f"{QUERY_AMOUNT}={payment.amount.render()}")
        if payment.spl_token is not None:
            params.append(f"{QUERY_SPL_TOKEN}={payment.spl_token.to_base58()}")
        params.extend(f"{QUERY_REFERENCE}={reference.to_base58()}" for reference in payment.references)
        for key, value in ((QUERY_LABEL, payment.label), (QUERY_MESSAGE, payment.message), (QUERY_MEMO, payment.spl_memo)):
            if value is not None:
                params.append(f"{key}={_encode_text(value)}")

        url = SOLANA_SCHEME + payment.recipient.to_base58()
        if params:
            url += "?" + "&".join(params)
        return url


@dataclass(frozen=True)
class BuildPaymentUrlResult:
    success: bool
    url: Optional[str] = None
    error: Optional[SolanaPayError] = None
    error_message: Optional[str] = None


class BuildPaymentUrl:
    def __init__(self, curve_policy: CurvePolicy = CurvePolicy.ANY):
        self.curve_policy = curve_policy

    def execute(
        self,
        recipient: str,
        amount: Optional[AmountLike] = None,
        spl_token: Optional[str] = None,
        references: Sequence[str] = (),
        label: Optional[str] = None,
        message: Optional[str] = None,
        memo: Optional[str] = None,
        max_decimals: Optional[int] = None,
    ) -> BuildPaymentUrlResult:
        try:
            builder = SolanaPayUrlBuilder().add_recipient(recipient, self.curve_policy)
            if amount is not None:
                builder = builder.add_amount(amount, max_decimals)
            if spl_token is not None:
                builder = builder.add_spl_token(spl_token)
            if references:
                builder = builder.add_reference_multiple(references)
            if label is not None:
                builder = builder.add_label(label)
            if message is not None:
                builder = builder.add_message(message)
            if memo is not None:
                builder = builder.add_spl_memo(memo)
            url = builder.to_url()
        except SolanaPayError as e:
            logger.warning(f"Cannot build Solana Pay URL ({type(e).__name__}): {e}")
            return BuildPaymentUrlResult(success=False, error=e, error_message=str(e))

        logger.debug(f"Built Solana Pay URL {url}")
        return BuildPaymentUrlResult(success=True, url=url)
