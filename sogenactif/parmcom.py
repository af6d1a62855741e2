"""Parameter files read by the Sogenactif binaries.

Every file is a list of ``KEY!value!`` lines.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Line = Tuple[str, str]


def format_lines(lines: Iterable[Line]) -> str:
    return "".join(f"{key}!{value}!\n" for key, value in lines)


def render_pathfile(
    debug: bool,
    logo_path: str,
    certificate_prefix: str,
    parameters_prefix: str,
    default_parameters: str,
) -> List[Line]:
    """Locations of every file the binaries need."""
    return [
        ("DEBUG", "YES" if debug else "NO"),
        ("D_LOGO", logo_path),
        ("F_CERTIFICATE", certificate_prefix),
        ("F_CTYPE", "php"),
        ("F_PARAM", parameters_prefix),
        ("F_DEFAULT", default_parameters),
    ]


def render_merchant_params(
    cancel_url: str,
    return_url: str,
    auto_response_url: Optional[str] = None,
    logo: str = "",
) -> List[Line]:
    lines = []
    if logo:
        lines.append(("LOGO", logo))
    lines.append(("CANCEL_URL", cancel_url))
    lines.append(("RETURN_URL", return_url))
    if auto_response_url:
        # Key spelled as the platform expects it
        lines.append(("AUTO_REPONSE_URL", auto_response_url))
    return lines


def render_platform_params(
    country: str,
    language: str,
    currency_code: str = "978",
    payment_means: str = "CB,2,VISA,2,MASTERCARD,2,PAYLIB,2",
) -> List[Line]:
    return [
        ("ADVERT", "sg.gif"),
        ("BGCOLOR", "ffffff"),
        ("BLOCK_ALIGN", "center"),
        ("BLOCK_ORDER", "1,2,3,4,5,6,7,8"),
        ("CONDITION", "SSL"),
        ("CURRENCY", currency_code),
        ("HEADER_FLAG", "yes"),
        ("LANGUAGE", language),
        ("LOGO2", "sogenactif.gif"),
        ("MERCHANT_COUNTRY", country),
        ("MERCHANT_LANGUAGE", language),
        ("PAYMENT_MEANS", payment_means),
        ("TARGET", "_top"),
        ("TEXTCOLOR", "000000"),
    ]


def write_param_file(path, lines: Iterable[Line]) -> Path:
    """Create (or overwrite) a parameter file."""
    target = Path(path)
    target.write_text(format_lines(lines), encoding="utf-8")
    logger.info("Created file %s", target)
    return target
