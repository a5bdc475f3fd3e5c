from decimal import Decimal

import pytest

from solana_pay.core.domain.exceptions import (
    ExcessPrecision,
    InvalidAddressEncoding,
    InvalidAddressLength,
    InvalidUrlEncoding,
    MalformedNumber,
    MissingRecipient,
    RecipientNotOnCurve,
    TooManyReferences,
)
from solana_pay.core.domain.value_objects import CurvePolicy, Number, PublicKey
from solana_pay.core.use_cases.url.build_url import BuildPaymentUrl, SolanaPayUrlBuilder
from solana_pay.core.use_cases.url.parse_url import parse_url
from solana_pay.infrastructure.services.decimals_lookup import NATIVE_DECIMALS_LOOKUP, ConstantDecimalsLookup
from tests.conftest import OFF_CURVE_ADDRESS, RECIPIENT, REFERENCE_X, REFERENCE_Y, REFERENCE_Z, USDC_MINT


def test_transfer_1_sol_url():
    url = (SolanaPayUrlBuilder()
           .add_recipient(RECIPIENT)
           .add_amount("1")
           .add_label("Michael")
           .add_message("Thanks for all the fish")
           .add_spl_memo("OrderId12345")
           .to_url())

    assert url == (
        "solana:mvines9iiHiQTysrwkJjGf2gb9Ex9jXJX8ns3qwf2kN"
        "?amount=1&label=Michael&message=Thanks%20for%20all%20the%20fish&memo=OrderId12345"
    )


def test_spl_token_url():
    url = SolanaPayUrlBuilder().add_recipient(RECIPIENT).add_amount("0.01").add_spl_token(USDC_MINT).to_url()

    assert url == f"solana:{RECIPIENT}?amount=0.01&spl-token={USDC_MINT}"


def test_recipient_only_url():
    assert SolanaPayUrlBuilder().add_recipient(RECIPIENT).to_url() == f"solana:{RECIPIENT}"


def test_first_param_uses_question_mark_without_amount():
    url = SolanaPayUrlBuilder().add_recipient(RECIPIENT).add_label("Michael").to_url()

    assert url == f"solana:{RECIPIENT}?label=Michael"


def test_key_order_is_stable():
    url = (SolanaPayUrlBuilder()
           .add_spl_memo("m")
           .add_reference(REFERENCE_X)
           .add_label("l")
           .add_spl_token(USDC_MINT)
           .add_message("msg")
           .add_amount("2")
           .add_reference(REFERENCE_Y)
           .add_recipient(RECIPIENT)
           .to_url())

    assert url == (
        f"solana:{RECIPIENT}?amount=2&spl-token={USDC_MINT}"
        f"&reference={REFERENCE_X}&reference={REFERENCE_Y}&label=l&message=msg&memo=m"
    )


@pytest.mark.asyncio
async def test_full_chain_round_trip():
    url = (SolanaPayUrlBuilder()
           .add_recipient(RECIPIENT)
           .add_amount("1")
           .add_spl_token(USDC_MINT)
           .add_label("Michael")
           .add_message("Thanks for all the fish")
           .add_spl_memo("OrderId12345")
           .add_reference(REFERENCE_X)
           .to_url())

    payment = await parse_url(url, ConstantDecimalsLookup(6))

    assert payment.recipient == PublicKey.from_base58(RECIPIENT)
    assert payment.amount == Number.parse("1")
    assert payment.spl_token == PublicKey.from_base58(USDC_MINT)
    assert payment.label == "Michael"
    assert payment.message == "Thanks for all the fish"
    assert payment.spl_memo == "OrderId12345"
    assert payment.references == (PublicKey.from_base58(REFERENCE_X),)


@pytest.mark.asyncio
@pytest.mark.parametrize("url", [
    f"solana:{RECIPIENT}?amount=1&label=Michael&message=Thanks%20for%20all%20the%20fish&memo=OrderId12345",
    f"solana:{RECIPIENT}?amount=0.010&spl-token={USDC_MINT}&reference={REFERENCE_X}&reference={REFERENCE_X}",
    f"solana:{RECIPIENT}?memo=a+b&label=Caf%C3%A9&message=100%25%20%26%20more&amount=.5",
    f"solana:{RECIPIENT}?label=&foo=bar",
    f"solana:{RECIPIENT}",
])
async def test_parse_build_parse_is_identity(url):
    lookup = ConstantDecimalsLookup(6)
    payment = await parse_url(url, lookup)

    rebuilt = SolanaPayUrlBuilder.from_descriptor(payment).to_url()

    assert await parse_url(rebuilt, lookup) == payment
    assert SolanaPayUrlBuilder.from_descriptor(payment).build() == payment


def test_text_is_percent_encoded():
    url = (SolanaPayUrlBuilder()
           .add_recipient(RECIPIENT)
           .add_label("Café & Co")
           .add_message("a+b=c?")
           .add_spl_memo("safe-._~")
           .to_url())

    assert url == f"solana:{RECIPIENT}?label=Caf%C3%A9%20%26%20Co&message=a%2Bb%3Dc%3F&memo=safe-._~"


def test_to_url_requires_recipient():
    builder = SolanaPayUrlBuilder().add_amount("1").add_label("Michael")

    with pytest.raises(MissingRecipient):
        builder.to_url()
    with pytest.raises(MissingRecipient):
        builder.build()


def test_failed_step_keeps_previous_state():
    builder = SolanaPayUrlBuilder().add_recipient(RECIPIENT).add_amount("1.5")

    with pytest.raises(MalformedNumber):
        builder.add_amount("-3")
    with pytest.raises(InvalidAddressEncoding):
        builder.add_recipient("not base58")
    with pytest.raises(InvalidAddressLength):
        builder.add_spl_token("1111")

    assert builder.amount == Number.parse("1.5")
    assert builder.recipient == PublicKey.from_base58(RECIPIENT)
    assert builder.spl_token is None
    assert builder.to_url() == f"solana:{RECIPIENT}?amount=1.5"


def test_each_step_returns_a_new_builder():
    empty = SolanaPayUrlBuilder()
    with_recipient = empty.add_recipient(RECIPIENT)

    assert empty.recipient is None
    assert with_recipient is not empty
    assert with_recipient.recipient == PublicKey.from_base58(RECIPIENT)


def test_add_reference_multiple_appends_in_order():
    builder = SolanaPayUrlBuilder().add_recipient(RECIPIENT).add_reference(REFERENCE_Z)

    builder = builder.add_reference_multiple([REFERENCE_X, REFERENCE_Y, REFERENCE_X])

    assert [str(reference) for reference in builder.references] == [REFERENCE_Z, REFERENCE_X, REFERENCE_Y, REFERENCE_X]


def test_add_reference_multiple_is_atomic():
    builder = SolanaPayUrlBuilder().add_recipient(RECIPIENT).add_reference(REFERENCE_Z)

    with pytest.raises(InvalidAddressEncoding):
        builder.add_reference_multiple([REFERENCE_X, REFERENCE_Y, "0OIl", REFERENCE_X])

    assert builder.references == (PublicKey.from_base58(REFERENCE_Z),)
    assert builder.to_url() == f"solana:{RECIPIENT}?reference={REFERENCE_Z}"


def test_reference_cap():
    builder = SolanaPayUrlBuilder().add_recipient(RECIPIENT).add_reference_multiple([REFERENCE_X] * 254)

    with pytest.raises(TooManyReferences):
        builder.add_reference(REFERENCE_Y)
    with pytest.raises(TooManyReferences):
        SolanaPayUrlBuilder().add_reference_multiple([REFERENCE_X] * 255)

    assert len(builder.references) == 254


def test_add_random_reference():
    builder = SolanaPayUrlBuilder().add_recipient(RECIPIENT).add_random_reference().add_random_reference()

    assert len(builder.references) == 2
    assert builder.references[0] != builder.references[1]
    assert all(len(reference.to_bytes()) == 32 for reference in builder.references)


@pytest.mark.parametrize("amount, expected", [
    ("0.010", "0.010"),
    (Decimal("2.50"), "2.50"),
    (7, "7"),
    (Number.from_parts(0, fractional=5, leading_zeroes=2), "0.005"),
])
def test_add_amount_accepts_exact_types(amount, expected):
    assert SolanaPayUrlBuilder().add_amount(amount).amount.render() == expected


@pytest.mark.parametrize("amount", [1.5, None, True, "1e3"])
def test_add_amount_rejects_inexact_types(amount):
    with pytest.raises(MalformedNumber):
        SolanaPayUrlBuilder().add_amount(amount)


def test_add_amount_with_precision_check():
    assert SolanaPayUrlBuilder().add_amount("0.000001", max_decimals=6).amount == Number.parse("0.000001")

    with pytest.raises(ExcessPrecision):
        SolanaPayUrlBuilder().add_amount("0.0000001", max_decimals=6)


def test_recipient_curve_policy():
    with pytest.raises(RecipientNotOnCurve):
        SolanaPayUrlBuilder().add_recipient(OFF_CURVE_ADDRESS, CurvePolicy.ON_CURVE)

    builder = SolanaPayUrlBuilder().add_recipient(OFF_CURVE_ADDRESS, CurvePolicy.OFF_CURVE)
    assert str(builder.recipient) == OFF_CURVE_ADDRESS


@pytest.mark.asyncio
async def test_build_use_case_success():
    result = BuildPaymentUrl().execute(
        recipient=RECIPIENT,
        amount="0.5",
        references=[REFERENCE_X, REFERENCE_Y],
        label="Coffee",
    )

    assert result.success
    assert result.url == f"solana:{RECIPIENT}?amount=0.5&reference={REFERENCE_X}&reference={REFERENCE_Y}&label=Coffee"
    payment = await parse_url(result.url, NATIVE_DECIMALS_LOOKUP)
    assert payment.label == "Coffee"


def test_build_use_case_reports_failed_field():
    result = BuildPaymentUrl().execute(recipient=RECIPIENT, amount="1", spl_token="0OIl")

    assert not result.success
    assert result.url is None
    assert isinstance(result.error, InvalidAddressEncoding)
    assert result.error.value == "0OIl"


def test_build_use_case_precision_check():
    result = BuildPaymentUrl().execute(recipient=RECIPIENT, amount="0.0000000001", max_decimals=9)

    assert not result.success
    assert isinstance(result.error, ExcessPrecision)


@pytest.mark.parametrize("method", ["add_label", "add_message", "add_spl_memo"])
def test_text_that_is_not_utf8_is_rejected(method):
    builder = SolanaPayUrlBuilder().add_recipient(RECIPIENT)

    with pytest.raises(InvalidUrlEncoding) as exc_info:
        getattr(builder, method)("bad \ud800 text")

    assert exc_info.value.value == "bad \ud800 text"
    assert builder.to_url() == f"solana:{RECIPIENT}"


def test_build_use_case_reports_invalid_text():
    result = BuildPaymentUrl().execute(recipient=RECIPIENT, amount="1", label="Coffee", memo="\ud800")

    assert not result.success
    assert result.url is None
    assert isinstance(result.error, InvalidUrlEncoding)
