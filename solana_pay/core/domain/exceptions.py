from typing import Optional


class SolanaPayError(ValueError):
    """Base class for every error raised while parsing or building a Solana Pay URL."""


class InvalidScheme(SolanaPayError):
    """
    URL does not start with the `solana:` scheme.
    """
    url: str

    def __init__(self, url: str) -> None:
        super().__init__(f"URL must start with 'solana:': {url!r}")
        self.url = url


class MissingRecipient(SolanaPayError):
    """
    Recipient is absent from the URL path, or was never set on a builder.
    """

    def __init__(self) -> None:
        super().__init__("Recipient address is missing")


class InvalidAddressEncoding(SolanaPayError):
    """
    Address contains characters outside of the base-58 alphabet.
    """
    value: str

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid base58 address: {value!r}")
        self.value = value


class InvalidAddressLength(SolanaPayError):
    """
    Address does not decode to exactly 32 bytes.
    """
    value: str
    length: int

    def __init__(self, value: str, length: int) -> None:
        super().__init__(f"Address must be 32 bytes, got {length}: {value!r}")
        self.value = value
        self.length = length


class RecipientNotOnCurve(SolanaPayError):
    """
    Recipient must be an Ed25519 point (a wallet), not a program derived address.
    """
    value: str

    def __init__(self, value: str) -> None:
        super().__init__(f"Recipient must lie on the Ed25519 curve: {value}")
        self.value = value


class RecipientOnCurve(SolanaPayError):
    """
    Recipient must be off the Ed25519 curve (a program derived address).
    """
    value: str

    def __init__(self, value: str) -> None:
        super().__init__(f"Recipient must not lie on the Ed25519 curve: {value}")
        self.value = value


class MalformedNumber(SolanaPayError):
    """
    Amount is not a plain non-negative decimal literal.
    """
    value: str

    def __init__(self, value: str, reason: Optional[str] = None) -> None:
        message = f"Malformed amount: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.value = value
        self.reason = reason


class ExcessPrecision(SolanaPayError):
    """
    Amount has more fractional digits than the asset supports.
    """
    value: str
    fractional_digits: int
    max_fractional_digits: int

    def __init__(self, value: str, fractional_digits: int, max_fractional_digits: int) -> None:
        super().__init__(
            f"Amount {value!r} has {fractional_digits} fractional digits, "
            f"asset supports {max_fractional_digits}"
        )
        self.value = value
        self.fractional_digits = fractional_digits
        self.max_fractional_digits = max_fractional_digits


class PrecisionLookupFailed(SolanaPayError):
    """
    Decimals of the SPL token mint could not be resolved.
    """
    mint: str

    def __init__(self, mint: str, reason: str) -> None:
        super().__init__(f"Could not resolve decimals for mint {mint}: {reason}")
        self.mint = mint
        self.reason = reason


class InvalidUrlEncoding(SolanaPayError):
    """
    Text is not valid UTF-8: percent-encoded input that does not decode, or
    a label, message or memo that cannot be encoded.
    """
    value: str

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid UTF-8 text: {value!r}")
        self.value = value


class InvalidQueryParam(SolanaPayError):
    """
    Query segment is not a `key=value` pair.
    """
    segment: str

    def __init__(self, segment: str) -> None:
        super().__init__(f"Invalid query parameter: {segment!r}")
        self.segment = segment


class TooManyReferences(SolanaPayError):
    """
    More reference addresses than fit in a single transaction.
    """
    count: int
    limit: int

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"Too many references: {count} (limit {limit})")
        self.count = count
        self.limit = limit
