"""Support for the Sogenactif online payment solution of la Société Générale.

https://www.sogenactif.com/

Load a settings file then initialize the platform::

    conf = load_config("conf/demo.cfg")
    sogen = Sogen(conf)
    form = sogen.checkout(new_transaction(Customer(id="funkyab"), "4.99"))
"""

from sogenactif.config import Config, load_config, replace_env_vars
from sogenactif.errors import (
    ApiError,
    BinaryNotFoundError,
    BinaryTimeoutError,
    ConfigError,
    ResponseParseError,
    SetupError,
    SogenError,
)
from sogenactif.models import Customer, Payment, Transaction, new_transaction
from sogenactif.sogen import CheckoutForm, Sogen

__all__ = [
    "ApiError",
    "BinaryNotFoundError",
    "BinaryTimeoutError",
    "CheckoutForm",
    "Config",
    "ConfigError",
    "Customer",
    "Payment",
    "ResponseParseError",
    "SetupError",
    "Sogen",
    "SogenError",
    "Transaction",
    "load_config",
    "new_transaction",
    "replace_env_vars",
]
