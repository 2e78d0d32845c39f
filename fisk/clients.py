from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Client:
    """Buyer registration data not carried by the request itself."""

    tin: str = ""
    vat: str = ""
    name: str = ""


def _norm_tin(value) -> str:
    """Return ``value`` as a stripped string (``""`` for blanks/NaN)."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def _read_table(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in {".xlsx", ".xls"}:
        return pd.read_excel(path, dtype=str)
    if suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("clients", [])
        return pd.DataFrame(data, dtype=str)
    return pd.read_csv(path, dtype=str)


def load_clients(path: Path | str | None) -> list[Client]:
    """Load the client lookup table from CSV, XLSX or JSON.

    Columns ``tin`` and ``vat`` are required (``pib``/``pdv`` are accepted as
    aliases); ``name`` is optional.  Row order is preserved because lookups
    take the first matching TIN.  A missing file yields an empty table.
    """
    if path is None:
        return []
    path = Path(path)
    if not path.exists():
        log.info("Client table %s does not exist", path)
        return []

    df = _read_table(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    df = df.rename(columns={"pib": "tin", "pdv": "vat", "ime": "name"})
    missing = {"tin", "vat"} - set(df.columns)
    if missing:
        raise ValueError(
            f"client table {path} lacks column(s): {', '.join(sorted(missing))}"
        )

    clients = [
        Client(
            tin=_norm_tin(row["tin"]),
            vat=_norm_tin(row["vat"]),
            name=_norm_tin(row.get("name")),
        )
        for _, row in df.iterrows()
    ]
    log.info("Loaded %d clients from %s", len(clients), path)
    return clients
