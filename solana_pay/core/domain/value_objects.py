import secrets
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

import base58
from solders.pubkey import Pubkey

from solana_pay.core.domain.constants import ADDRESS_LENGTH
from solana_pay.core.domain.exceptions import (
    ExcessPrecision,
    InvalidAddressEncoding,
    InvalidAddressLength,
    MalformedNumber,
    RecipientNotOnCurve,
    RecipientOnCurve,
)

_BASE58_ALPHABET = frozenset(base58.BITCOIN_ALPHABET.decode("ascii"))
_DIGITS = frozenset("0123456789")


@dataclass(frozen=True)
class PublicKey:
    """A 32 byte Solana address. Text form is base-58."""
    raw: bytes

    def __post_init__(self):
        if len(self.raw) != ADDRESS_LENGTH:
            raise InvalidAddressLength(self.raw.hex(), len(self.raw))

    @classmethod
    def from_base58(cls, text: str) -> "PublicKey":
        # b58decode strips trailing whitespace, so the alphabet is checked up front
        if not text or not set(text) <= _BASE58_ALPHABET:
            raise InvalidAddressEncoding(text)
        try:
            raw = base58.b58decode(text)
        except ValueError:
            raise InvalidAddressEncoding(text) from None
        if len(raw) != ADDRESS_LENGTH:
            raise InvalidAddressLength(text, len(raw))
        return cls(raw)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray]) -> "PublicKey":
        return cls(bytes(data))

    @classmethod
    def random(cls) -> "PublicKey":
        """Fresh random address, suitable as a payment reference."""
        return cls(secrets.token_bytes(ADDRESS_LENGTH))

    def to_base58(self) -> str:
        return base58.b58encode(self.raw).decode("ascii")

    def to_bytes(self) -> bytes:
        return self.raw

    def is_on_curve(self) -> bool:
        return Pubkey(self.raw).is_on_curve()

    def __str__(self) -> str:
        return self.to_base58()

    def __repr__(self) -> str:
        return f"PublicKey({self.to_base58()})"


class CurvePolicy(Enum):
    ANY = "any"
    ON_CURVE = "on_curve"
    OFF_CURVE = "off_curve"

    def check(self, key: PublicKey) -> PublicKey:
        if self is CurvePolicy.ON_CURVE and not key.is_on_curve():
            raise RecipientNotOnCurve(key.to_base58())
        if self is CurvePolicy.OFF_CURVE and key.is_on_curve():
            raise RecipientOnCurve(key.to_base58())
        return key


@dataclass(frozen=True)
class Number:
    """
    Non-negative decimal literal kept exactly as written.

    `leading_zeroes` counts the zeros right after the decimal point (so `0.01`
    and `0.1` stay distinct), `significant_digits_count` the fractional digits
    after them and `total_fractional_count` every fractional digit.
    """
    integral: int = 0
    fractional: int = 0
    leading_zeroes: int = 0
    significant_digits_count: int = 0
    as_string: str = "0"
    total_fractional_count: int = 0

    @classmethod
    def parse(cls, text: str) -> "Number":
        if not text:
            raise MalformedNumber(text, "empty")
        if text[0] in "+-":
            raise MalformedNumber(text, "sign is not allowed")
        if text.count(".") > 1:
            raise MalformedNumber(text, "more than one decimal point")

        integral_str, _, fractional_str = text.partition(".")
        if not set(integral_str + fractional_str) <= _DIGITS:
            raise MalformedNumber(text, "only digits and one '.' are allowed")
        if not integral_str and not fractional_str:
            raise MalformedNumber(text, "no digits")

        try:
            integral = int(integral_str or "0")
            fractional = int(fractional_str or "0")
        except ValueError as e:
            # str-to-int conversion is capped by sys.get_int_max_str_digits()
            raise MalformedNumber(text, "too many digits") from e

        leading_zeroes = len(fractional_str) - len(fractional_str.lstrip("0"))
        return cls(
            integral=integral,
            fractional=fractional,
            leading_zeroes=leading_zeroes,
            significant_digits_count=len(fractional_str) - leading_zeroes,
            as_string=text,
            total_fractional_count=len(fractional_str),
        )

    @classmethod
    def from_parts(cls, integral: int, fractional: int = 0, leading_zeroes: int = 0) -> "Number":
        """Build from components; `as_string` is reconstructed from them."""
        for name, value in (("integral", integral), ("fractional", fractional), ("leading_zeroes", leading_zeroes)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise MalformedNumber(str(value), f"{name} must be a non-negative integer")

        try:
            fraction_digits = "0" * leading_zeroes + (str(fractional) if fractional else "")
            integral_digits = str(integral)
        except ValueError as e:
            raise MalformedNumber("<integer>", "too many digits") from e
        if fraction_digits:
            return cls.parse(f"{integral_digits}.{fraction_digits}")
        return cls.parse(integral_digits)

    @classmethod
    def from_decimal(cls, value: Decimal) -> "Number":
        if not value.is_finite() or value.is_signed():
            raise MalformedNumber(str(value), "must be a finite non-negative value")
        return cls.parse(format(value, "f"))

    def validate_precision(self, max_fractional_digits: int) -> "Number":
        if self.total_fractional_count > max_fractional_digits:
            raise ExcessPrecision(self.as_string, self.total_fractional_count, max_fractional_digits)
        return self

    def to_decimal(self) -> Decimal:
        return Decimal(self.as_string)

    def to_base_units(self, decimals: int) -> int:
        """Amount in the asset's smallest unit, e.g. lamports for SOL."""
        self.validate_precision(decimals)
        scale = decimals - self.total_fractional_count
        return self.integral * 10 ** decimals + self.fractional * 10 ** scale

    def render(self) -> str:
        return self.as_string

    def __str__(self) -> str:
        return self.as_string


@dataclass(frozen=True)
class UiTokenAmount:
    amount: int  # raw base units
    decimals: int
    ui_amount_string: Optional[Number] = None

    @classmethod
    def from_number(cls, number: Number, decimals: int) -> "UiTokenAmount":
        return cls(amount=number.to_base_units(decimals), decimals=decimals, ui_amount_string=number)
