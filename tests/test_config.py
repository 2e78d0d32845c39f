import json

import pytest

from fisk.config import SellerConfig, load_config
from fisk.errors import InvalidEnvironment
from fisk.verify import Environment


def test_load_config(seller_path):
    cfg = load_config(seller_path)
    assert cfg == SellerConfig(
        name="Primjer d.o.o.",
        address="Bulevar Svetog Petra Cetinjskog 1, Podgorica",
        tin="12345678",
        vat="30/31-12345-6",
        phone="+382 20 000 000",
        fax="+382 20 000 001",
        bank_account="510-0000000000000-00",
        environment=Environment.TEST,
    )


def test_env_variable_overrides_file(seller_path, monkeypatch):
    monkeypatch.setenv("FISK_ENV", "production")
    assert load_config(seller_path).environment is Environment.PRODUCTION


def test_missing_environment_defaults_to_test(tmp_path):
    path = tmp_path / "s.json"
    path.write_text(json.dumps({"name": "X", "extra": 1}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg.environment is Environment.TEST
    assert cfg.name == "X"


def test_unknown_environment(tmp_path):
    path = tmp_path / "s.json"
    path.write_text(json.dumps({"environment": "STAGING"}), encoding="utf-8")
    with pytest.raises(InvalidEnvironment):
        load_config(path)
