import json

import pandas as pd
import pytest

from fisk.clients import Client, load_clients
from fisk.tax import find_client


def test_load_csv_keeps_order(clients_path):
    clients = load_clients(clients_path)
    assert [c.tin for c in clients] == ["11111111", "87654321", "87654321"]
    assert clients[1] == Client("87654321", "30/31-87654-3", "Kupac d.o.o.")


def test_first_match_wins(clients_path):
    client = find_client(load_clients(clients_path), "87654321")
    assert client.vat == "30/31-87654-3"


def test_no_match_gives_empty_client(clients_path):
    client = find_client(load_clients(clients_path), "00000000")
    assert client == Client()
    assert client.vat == ""


def test_missing_file_is_empty(tmp_path):
    assert load_clients(tmp_path / "missing.csv") == []
    assert load_clients(None) == []


def test_leading_zeros_survive(tmp_path):
    path = tmp_path / "c.csv"
    path.write_text("tin,vat\n01234567,30/31-00001-1\n", encoding="utf-8")
    assert load_clients(path)[0].tin == "01234567"


def test_aliases_and_blank_name(tmp_path):
    path = tmp_path / "c.csv"
    path.write_text("PIB,PDV\n87654321,30/31-1\n", encoding="utf-8")
    assert load_clients(path) == [Client("87654321", "30/31-1", "")]


def test_json_table(tmp_path):
    path = tmp_path / "c.json"
    path.write_text(
        json.dumps({"clients": [{"tin": "1", "vat": "V1"}, {"tin": "2", "vat": "V2"}]}),
        encoding="utf-8",
    )
    assert [c.vat for c in load_clients(path)] == ["V1", "V2"]


def test_xlsx_table(tmp_path):
    path = tmp_path / "c.xlsx"
    pd.DataFrame(
        {"tin": ["87654321"], "vat": ["30/31-87654-3"], "name": ["Kupac"]}
    ).to_excel(path, index=False)
    assert load_clients(path) == [Client("87654321", "30/31-87654-3", "Kupac")]


def test_missing_columns(tmp_path):
    path = tmp_path / "c.csv"
    path.write_text("tin,name\n1,X\n", encoding="utf-8")
    with pytest.raises(ValueError, match="vat"):
        load_clients(path)
