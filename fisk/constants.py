"""Project-wide constants."""

from decimal import Decimal
from os import getenv


def _env_bool(name: str, default: str | None = None) -> bool:
    """Return a boolean flag read from the environment."""

    value = getenv(name)
    if value is None:
        value = default if default is not None else "0"
    value = str(value).strip().lower()
    return value not in {"0", "false", "no", "off", ""}


def _env_str(name: str, default: str | None = None) -> str | None:
    """Return a stripped string from the environment or ``default``."""

    raw = getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    return str(raw).strip()


# Extra parse detail in the log.
TRACE = _env_bool("FISK_TRACE", "0")

# Paths to the seller configuration and client table, and the environment
# override used when selecting the verification link.
CONFIG_ENV_VAR = "FISK_CONFIG"
CLIENTS_ENV_VAR = "FISK_CLIENTS"
ENVIRONMENT_ENV_VAR = "FISK_ENV"

DEFAULT_CURRENCY = "EUR"
DEFAULT_VAT_RATE = Decimal("21")

# Difference between recomputed and declared totals that is still
# considered a rounding artefact.
TOTALS_TOLERANCE = Decimal("0.01")

QR_IMAGE_SIZE = 256
