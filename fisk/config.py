"""Static seller configuration.

Phone, fax, bank account and VAT number are printed in the invoice header
but are not part of the fiscal XML, so they come from a JSON file::

    {
      "name": "Primjer d.o.o.",
      "address": "Bulevar 1, Podgorica",
      "tin": "12345678",
      "vat": "30/31-12345-6",
      "phone": "+382 20 000 000",
      "fax": "+382 20 000 001",
      "bank_account": "510-0000000000000-00",
      "environment": "TEST"
    }
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path

from fisk.constants import ENVIRONMENT_ENV_VAR, _env_str
from fisk.verify import Environment

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SellerConfig:
    name: str = ""
    address: str = ""
    tin: str = ""
    vat: str = ""
    phone: str = ""
    fax: str = ""
    bank_account: str = ""
    environment: Environment = Environment.TEST


def load_config(path: Path | str) -> SellerConfig:
    """Read :class:`SellerConfig` from ``path``.

    ``FISK_ENV`` overrides the ``environment`` key.  Unknown keys are
    ignored; an unknown environment raises :class:`InvalidEnvironment`.
    """
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    known = {f.name for f in fields(SellerConfig)}
    values = {
        k: str(v) for k, v in data.items() if k in known and v is not None
    }
    env = _env_str(ENVIRONMENT_ENV_VAR) or values.pop("environment", None)
    values.pop("environment", None)
    cfg = SellerConfig(
        **values,
        environment=Environment.parse(env) if env else Environment.TEST,
    )
    log.debug("Loaded seller config %s (%s)", path, cfg.environment.value)
    return cfg
