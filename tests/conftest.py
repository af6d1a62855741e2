"""Shared fixtures: a merchant tree with fake vendor binaries."""

import os
import stat
from pathlib import Path

import pytest

from sogenactif import Config
from sogenactif.sogen import binary_dir_name

MERCHANT_ID = "014213245611111"

# The fake binaries record their arguments in <binary>.args and
# print the content of <binary>.out
FAKE_BINARY = """#!/bin/sh
printf '%s\\n' "$@" > "$0.args"
cat "$0.out"
"""

PAYMENT_FIELDS = [
    MERCHANT_ID,  # merchant_id
    "fr",  # merchant_country
    "499",  # amount, in cents
    "123456",  # transaction_id
    "CB",  # payment_means
    "20131025153045",  # transmission_date
    "153112",  # payment_time
    "20131025",  # payment_date
    "1382711472",  # payment_certificate
    "00",  # response_code
    "654321",  # authorization_id
    "978",  # currency_code
    "4974.01",  # card_number
    "1",  # cvv_flag
    "4D",  # cvv_response_code
    "00",  # bank_response_code
    "",  # complementary_code
    "",  # complementary_info
    "ctx",  # return_context
    "basket-42",  # caddie
    "",  # receipt_complement
    "fr",  # merchant_language
    "fr",  # language
    "funkyab",  # customer_id
    "buyer@example.com",  # customer_email
    "192.168.1.1",  # customer_ip_address
    "0",  # capture_day
    "AUTHOR_CAPTURE",  # capture_mode
    "",  # data
    "",  # order_validity
    "",  # score_value
    "",  # score_color
    "",  # score_info
    "",  # score_threshold
    "",  # score_profile
]

CHECKOUT_FORM = '<form method="post" action="https://payment.sogenactif.com/cgis-payment">CB VISA</form>'


def binary_output(code="0", message="", payload=()):
    return "!" + "!".join([code, message, *payload]) + "!"


def write_binary(path: Path, stdout: str = "") -> Path:
    path.write_text(FAKE_BINARY)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    Path(f"{path}.out").write_text(stdout)
    return path


def recorded_args(path: Path):
    return Path(f"{path}.args").read_text().splitlines()


@pytest.fixture
def merchant_tree(tmp_path):
    library = tmp_path / "lib"
    bin_dir = library / binary_dir_name()
    bin_dir.mkdir(parents=True)
    write_binary(bin_dir / "request", binary_output(payload=[CHECKOUT_FORM]))
    write_binary(bin_dir / "response", binary_output(payload=PAYMENT_FIELDS))

    merchants = tmp_path / "merchant"
    merchant_dir = merchants / MERCHANT_ID
    merchant_dir.mkdir(parents=True)
    (merchant_dir / f"certif.fr.{MERCHANT_ID}.php").write_text("certificate")

    media = tmp_path / "media"
    media.mkdir()
    (media / "CB.gif").write_bytes(b"GIF89a")

    return tmp_path


@pytest.fixture
def config(merchant_tree):
    return Config(
        library_path=str(merchant_tree / "lib"),
        merchants_rootdir=str(merchant_tree / "merchant"),
        media_path=str(merchant_tree / "media"),
        merchant_id=MERCHANT_ID,
        cancel_url="http://shop.example.com/cancel",
        return_url="http://shop.example.com/thanks",
        auto_response_url="http://shop.example.com/autoresponse",
    )


@pytest.fixture
def bin_dir(merchant_tree):
    return merchant_tree / "lib" / binary_dir_name()


@pytest.fixture
def merchant_dir(merchant_tree):
    return merchant_tree / "merchant" / MERCHANT_ID


@pytest.fixture(autouse=True)
def _no_shell_env(monkeypatch):
    monkeypatch.delenv("SHOP_HOST", raising=False)
    yield
    os.environ.pop("SHOP_HOST", None)
