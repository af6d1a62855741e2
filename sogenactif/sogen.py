"""Setup of the merchant files and invocation of the vendor binaries.

Given a merchant id, ``Sogen(config)`` checks that the merchant's certificate
is available in ``<merchants_rootdir>/<merchant_id>`` and creates (or
overwrites) the files required by the platform::

    certif.<country>.<merchant_id>.php  # the merchant certificate, not generated
    parcom.<merchant_id>                # cancel and return urls
    parcom.sogenactif                   # display and payment means parameters
    pathfile                            # locations of all of the above

``checkout()`` then produces the form redirecting a buyer to the payment
server, and ``handle_payment()`` decodes the server's answer.
"""

import logging
import platform
import subprocess
from pathlib import Path
from typing import List, NamedTuple, Optional

from sogenactif import parmcom
from sogenactif.config import Config
from sogenactif.errors import BinaryNotFoundError, BinaryTimeoutError, SetupError
from sogenactif.models import Payment, Transaction
from sogenactif.response import parse_payment, split_output

logger = logging.getLogger(__name__)

_GOARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
}


def binary_dir_name(system: Optional[str] = None, machine: Optional[str] = None) -> str:
    """Name of the directory holding the binaries for this host, e.g. linux_amd64."""
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()
    return f"{system}_{_GOARCH.get(machine, machine)}"


class CheckoutForm(NamedTuple):
    html: str
    # Debug info, only filled when debug is on
    debug: str = ""

    def __str__(self) -> str:
        return self.debug + self.html


class Sogen:
    """Files and binaries of the Sogenactif platform for one merchant."""

    def __init__(self, config: Config):
        if config is None:
            raise SetupError("can't initialize Sogen framework: nil config")
        merchant_id = config.merchant_id.strip(" ")
        if not merchant_id:
            raise SetupError("missing merchant ID")
        rootdir = config.merchants_rootdir.strip(" ")
        if not rootdir:
            raise SetupError("missing merchant root directory (for config files and certificates)")
        library_path = Path(config.library_path)
        if not config.library_path or not library_path.exists():
            raise SetupError(f"bad library_path: {config.library_path!r} does not exist")

        self.config = config.model_copy(update={"merchant_id": merchant_id, "merchants_rootdir": rootdir})
        logger.info("Initializing the Sogenactif payment system (%s)", merchant_id)

        self.merchant_dir = Path(rootdir) / merchant_id
        self.certificate_prefix = self.merchant_dir / "certif"
        self.parameters_prefix = self.merchant_dir / "parcom"
        self.parameters_sogenactif = self.merchant_dir / "parcom.sogenactif"
        self.pathfile = self.merchant_dir / "pathfile"

        bin_dir = library_path / binary_dir_name()
        self.request_file = bin_dir / "request"
        self.response_file = bin_dir / "response"
        for binary in (self.request_file, self.response_file):
            if not binary.is_file():
                raise SetupError(f"{binary.name} binary: {binary} not found")

        if not self.merchant_dir.is_dir():
            raise SetupError(f"missing certificate file in directory {self.merchant_dir}")
        cert_file = self.merchant_dir / f"certif.{self.config.merchant_country}.{merchant_id}.php"
        if not cert_file.is_file():
            raise SetupError(f"missing certificate file {cert_file}")
        logger.info("Found certificate file %s", cert_file)

        self._write_files()

    def _write_files(self) -> None:
        c = self.config
        try:
            parmcom.write_param_file(
                self.pathfile,
                parmcom.render_pathfile(
                    c.debug,
                    c.logo_path,
                    str(self.certificate_prefix),
                    str(self.parameters_prefix),
                    str(self.parameters_sogenactif),
                ),
            )
            parmcom.write_param_file(
                f"{self.parameters_prefix}.{c.merchant_id}",
                parmcom.render_merchant_params(
                    c.cancel_url, c.return_url, c.auto_response_url, logo=c.merchant_logo
                ),
            )
            parmcom.write_param_file(
                self.parameters_sogenactif,
                parmcom.render_platform_params(
                    c.merchant_country,
                    c.merchant_language,
                    currency_code=c.merchant_currency_code,
                    payment_means=c.payment_means,
                ),
            )
        except OSError as e:
            raise SetupError(f"cannot write platform files in {self.merchant_dir}: {e}") from e

    def request_params(self, t: Transaction) -> List[str]:
        """Command line parameters of the request binary."""
        params = {
            "merchant_id": self.config.merchant_id,
            "merchant_country": self.config.merchant_country,
            "amount": str(t.cents),
            "currency_code": self.config.merchant_currency_code,
            "pathfile": str(self.pathfile),
            "caddie": t.customer.caddie,
        }
        if t.customer.id:
            params["customer_id"] = t.customer.id
        if t.customer.cancel_url:
            params["cancel_return_url"] = t.customer.cancel_url
        if t.customer.return_url:
            params["normal_return_url"] = t.customer.return_url
        return [f"{k}={v}" for k, v in params.items()]

    def _run(self, binary: Path, args: List[str]) -> str:
        try:
            proc = subprocess.run(
                [str(binary), *args],
                capture_output=True,
                text=True,
                timeout=self.config.binary_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise BinaryTimeoutError(
                f"{binary.name} binary timed out after {self.config.binary_timeout}s"
            ) from e
        except OSError as e:
            raise BinaryNotFoundError(f"error: {binary.name} executable not found! ({e})") from e
        if proc.returncode != 0:
            logger.warning("%s exited with status %d: %s", binary.name, proc.returncode, proc.stderr.strip())
        return proc.stdout

    def checkout(self, t: Transaction) -> CheckoutForm:
        """Generate the HTML form redirecting the buyer to the payment server."""
        out = split_output(self._run(self.request_file, self.request_params(t)), "request")
        body = out.payload[0] if out.payload else ""
        logger.info("Checkout form generated for %s cents (customer %r)", t.cents, t.customer.id)
        return CheckoutForm(html=body, debug=out.message)

    def handle_payment(self, message: str) -> Payment:
        """Decode the DATA message posted back by the payment server."""
        out = split_output(
            self._run(self.response_file, [f"pathfile={self.pathfile}", f"message={message}"]),
            "response",
        )
        if out.message:
            logger.debug("response binary: %s", out.message)
        payment = parse_payment(out.payload)
        logger.info(
            "Payment %s for %s: response code %s",
            payment.transaction_id,
            payment.amount,
            payment.response_code,
        )
        return payment
