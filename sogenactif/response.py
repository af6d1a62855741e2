"""Parsing of the ``!``-delimited output printed by the vendor binaries."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import List, NamedTuple, Sequence

from sogenactif.errors import ApiError, BinaryNotFoundError, ResponseParseError
from sogenactif.models import Payment

# Dates sent by the payment server carry no zone
SERVER_TZ = timezone(timedelta(hours=1))
SERVER_DATETIME_FORMAT = "%Y%m%d%H%M%S"

# Positions of the values returned by the response binary
PAYMENT_FIELDS = (
    "merchant_id",
    "merchant_country",
    "amount",
    "transaction_id",
    "payment_means",
    "transmission_date",
    "payment_time",
    "payment_date",
    "payment_certificate",
    "response_code",
    "authorization_id",
    "currency_code",
    "card_number",
    "cvv_flag",
    "cvv_response_code",
    "bank_response_code",
    "complementary_code",
    "complementary_info",
    "return_context",
    "caddie",
    "receipt_complement",
    "merchant_language",
    "language",
    "customer_id",
    "customer_email",
    "customer_ip_address",
    "capture_day",
    "capture_mode",
    "data",
    "order_validity",
    "score_value",
    "score_color",
    "score_info",
    "score_threshold",
    "score_profile",
)


class BinaryOutput(NamedTuple):
    code: str
    # Holds debug info when DEBUG is set to YES
    message: str
    payload: List[str]


def split_output(stdout: str, binary: str = "request") -> BinaryOutput:
    """Split a binary's stdout and check its return code."""
    parts = stdout.split("!")
    code = parts[1] if len(parts) > 1 else ""
    message = parts[2] if len(parts) > 2 else ""
    if code == "" and message == "":
        raise BinaryNotFoundError(f"error: {binary} executable not found!")
    if code != "0":
        raise ApiError(code, message)
    return BinaryOutput(code, message, parts[3:])


def parse_server_datetime(value: str) -> datetime:
    # strptime alone would take 1-digit fields from a truncated value
    if len(value) != 14 or not (value.isascii() and value.isdigit()):
        raise ResponseParseError(f"expected 14 digits (YYYYMMDDhhmmss), got {value!r}")
    try:
        parsed = datetime.strptime(value, SERVER_DATETIME_FORMAT)
    except ValueError as e:
        raise ResponseParseError(str(e)) from e
    return parsed.replace(tzinfo=SERVER_TZ)


def parse_payment(fields: Sequence[str]) -> Payment:
    """Build a Payment from the payload of the response binary."""
    if len(fields) < len(PAYMENT_FIELDS):
        raise ResponseParseError(
            f"payment response has {len(fields)} fields, expected {len(PAYMENT_FIELDS)}"
        )
    values = dict(zip(PAYMENT_FIELDS, fields))

    try:
        cents = Decimal(values["amount"])
    except InvalidOperation as e:
        raise ResponseParseError(f"amount conversion error: {values['amount']!r}") from e
    if not cents.is_finite():
        raise ResponseParseError(f"amount conversion error: {values['amount']!r}")
    amount = cents / 100

    try:
        transmission_date = parse_server_datetime(values["transmission_date"])
    except ResponseParseError as e:
        raise ResponseParseError(f"transmission date conversion error: {e}") from e
    try:
        payment_date = parse_server_datetime(values["payment_date"] + values["payment_time"])
    except ResponseParseError as e:
        raise ResponseParseError(f"payment datetime conversion error: {e}") from e

    del values["payment_time"]
    values.update(
        amount=amount,
        transmission_date=transmission_date,
        payment_date=payment_date,
    )
    return Payment(**values)
