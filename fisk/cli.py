# File: fisk/cli.py
import logging
import os
from datetime import date
from pathlib import Path

import click

from fisk.assemble import TemplateVariant
from fisk.clients import load_clients
from fisk.config import SellerConfig, load_config
from fisk.constants import CLIENTS_ENV_VAR, CONFIG_ENV_VAR, ENVIRONMENT_ENV_VAR
from fisk.errors import FiskError, ParseError
from fisk.exempt import period_table, summary_from_table
from fisk.parsing.efi import parse_request
from fisk.parsing.xmlutils import load_document
from fisk.pipeline import Params, generate_exempt, generate_pdf
from fisk.verify import Environment, build_verification_url


@click.group()
def main():
    """fisk – PDF računi iz fiskaliziranih RegisterInvoice XML datotek."""
    logging.basicConfig(level=logging.INFO)
    pass


def _seller_config(config: str | None) -> SellerConfig:
    path = config or os.getenv(CONFIG_ENV_VAR)
    if not path:
        raise click.UsageError(
            f"Seller configuration missing: use --config or set {CONFIG_ENV_VAR}."
        )
    try:
        return load_config(path)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Cannot read config {path}: {e}")


def _environment(env: str | None) -> Environment | None:
    env = env or os.getenv(ENVIRONMENT_ENV_VAR)
    if not env:
        return None
    try:
        return Environment.parse(env)
    except FiskError as e:
        raise click.BadParameter(str(e), param_hint="--env")


def _date(value: str, name: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint=name)


@main.command()
@click.argument("request", type=click.Path(exists=True, dir_okay=False))
@click.argument("response", type=click.Path(exists=True, dir_okay=False))
@click.argument("output", type=click.Path(dir_okay=False))
@click.option("--config", type=click.Path(), default=None,
              help=f"Seller JSON config (default: ${CONFIG_ENV_VAR})")
@click.option("--clients", type=click.Path(), default=None,
              help=f"Client table CSV/XLSX/JSON (default: ${CLIENTS_ENV_VAR})")
@click.option("--env", "env", default=None,
              help="TEST or PRODUCTION; overrides the config")
@click.option("--internal-number", default="", help="Interna številka računa")
@click.option(
    "--variant",
    type=click.Choice([v.value for v in TemplateVariant]),
    default=TemplateVariant.FULL.value,
    show_default=True,
)
def invoice(request, response, output, config, clients, env, internal_number, variant):
    """Izdelaj PDF račun iz REQUEST in RESPONSE XML datotek."""
    seller = _seller_config(config)
    clients_path = clients or os.getenv(CLIENTS_ENV_VAR)
    try:
        client_list = load_clients(clients_path)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Cannot read clients {clients_path}: {e}")

    params = Params(
        seller=seller,
        req_file=Path(request),
        resp_file=Path(response),
        out_file=Path(output),
        clients=client_list,
        internal_number=internal_number,
        environment=_environment(env),
        variant=TemplateVariant(variant),
    )
    try:
        path = generate_pdf(params)
    except FiskError as e:
        raise click.ClickException(str(e))
    click.echo(f"[OK] {path}")


@main.command()
@click.argument("request", type=click.Path(exists=True, dir_okay=False))
@click.option("--env", "env", default=None, help="TEST or PRODUCTION")
def link(request, env):
    """Izpiši verifikacijsko povezavo (vsebino QR kode)."""
    environment = _environment(env) or Environment.TEST
    try:
        url = build_verification_url(load_document(Path(request)), environment)
    except FiskError as e:
        raise click.ClickException(str(e))
    click.echo(url)


@main.command()
@click.argument("requests", type=click.Path(exists=True), nargs=-1, required=True)
@click.option("--from", "date_from", required=True, help="YYYY-MM-DD")
@click.option("--to", "date_to", required=True, help="YYYY-MM-DD")
@click.option("--output", "-o", type=click.Path(dir_okay=False), required=True)
@click.option("--config", type=click.Path(), default=None,
              help=f"Seller JSON config (default: ${CONFIG_ENV_VAR})")
def exempt(requests, date_from, date_to, output, config):
    """Periodično poročilo za REQUESTS (datoteke ali mape z *.xml)."""
    seller = _seller_config(config)
    period_from = _date(date_from, "--from")
    period_to = _date(date_to, "--to")

    files: list[Path] = []
    for path_str in requests:
        path = Path(path_str)
        if path.is_dir():
            files.extend(sorted(path.rglob("*.xml")))
        else:
            files.append(path)

    parsed = []
    for p in files:
        try:
            parsed.append(parse_request(p))
        except ParseError as e:
            # odgovori in druge XML datoteke v arhivu se preskočijo
            click.echo(f"[NAPAKA PARSANJA] {p}: {e}")

    df = period_table(parsed, period_from, period_to)
    if not df.empty:
        click.echo(df.to_string(index=False))
    summary = summary_from_table(df)
    try:
        path = generate_exempt(seller, period_from, period_to, summary, output)
    except FiskError as e:
        raise click.ClickException(str(e))
    click.echo(f"[OK] {path}: {summary.count} računov, skupaj {summary.total:.2f}")
