from decimal import Decimal

import pytest

from bank_recon.config import (
    MAX_FILE_SIZE_BYTES,
    ReconConfig,
    generate_default_config,
    load_config,
)
from bank_recon.utils.exceptions import ConfigurationError


def test_defaults_without_file():
    config = load_config(None)

    assert config.input.max_file_size_bytes == MAX_FILE_SIZE_BYTES == 10 * 1024 * 1024
    assert config.matching.auto_match_threshold == 3
    assert config.matching.amount_tolerance_decimal == Decimal("0.01")
    assert config.reconciliation.balance_tolerance_decimal == Decimal("0.01")
    assert config.config_file_path is None


def test_partial_yaml_is_deep_merged(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "matching:\n"
        "  date_tolerance_days: 5\n"
        "input:\n"
        "  csv:\n"
        "    column_keywords:\n"
        "      amount: value\n"
    )

    config = load_config(path)

    assert config.matching.date_tolerance_days == 5
    assert config.matching.auto_match_threshold == 3
    assert config.input.csv.column_keywords["amount"] == "value"
    assert config.input.csv.column_keywords["date"] == "date"
    assert config.config_file_path == str(path)


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("matching: [unclosed\n")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_non_mapping_root(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_invalid_value(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("matching:\n  auto_match_threshold: high\n")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_generated_config_loads_back(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    generate_default_config(path)

    assert path.read_text().startswith("# Bank statement reconciliation configuration")
    assert load_config(path).model_dump(exclude={"config_file_path"}) == ReconConfig().model_dump(
        exclude={"config_file_path"}
    )
