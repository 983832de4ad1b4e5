"""
Tests for statutory parameter loading.

Covers:
- The packaged defaults match the rule objects' defaults
- ESTATE_CONFIG_TRACE on every load
- Rejection of floats, unknown keys and out-of-range values
- Partial overrides of the S.29 weight tables
"""

from decimal import Decimal
from textwrap import dedent

import pytest
import yaml

from estate_config import get_statutory_parameters
from estate_config.loader import compute_checksum, parse_decimal, parse_statutory_parameters
from estate_engines.dependency import DependantRelationship, DependencyLevel
from estate_engines.section35 import Section35Rules


def _write(tmp_path, text: str):
    path = tmp_path / "parameters.yaml"
    path.write_text(dedent(text))
    return path


class TestDefaults:

    def test_packaged_defaults(self):
        params = get_statutory_parameters()
        assert params.version == "2024.1"
        assert params.jurisdiction == "KE"
        assert params.currency == "KES"
        assert params.section35 == Section35Rules()
        assert params.section35.spousal_residue_fraction == Decimal(1) / Decimal(3)
        assert params.section40.minimum_houses == 2
        assert params.hotchpot.default_inflation_rate == Decimal("0.05")
        assert params.minimum_hotchpot_adjustment == Decimal("0")
        assert params.dependency.relationship_weights[DependantRelationship.PARENT] == Decimal("0.7")
        assert params.dependency.level_weights[DependencyLevel.NONE] == Decimal("0")
        assert params.debt.secured_limitation_years == 12
        assert params.debt.tax_creditor_name == "Kenya Revenue Authority"

    def test_checksum_is_deterministic(self):
        first = get_statutory_parameters()
        second = get_statutory_parameters()
        assert first.checksum == second.checksum
        assert len(first.checksum) == 64

    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_load_is_traced(self, captured_logs):
        params = get_statutory_parameters()
        traces = [r for r in captured_logs() if r["message"] == "ESTATE_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["parameters_version"] == "2024.1"
        assert traces[0]["checksum"] == params.checksum
        assert traces[0]["source"] == "defaults.yaml"


class TestOverrides:

    def test_minimal_file_keeps_defaults(self, tmp_path):
        params = get_statutory_parameters(_write(tmp_path, 'version: "test"\n'))
        assert params.version == "test"
        assert params.section35 == Section35Rules()
        assert params.debt.unsecured_limitation_years == 6

    def test_scalar_overrides(self, tmp_path):
        params = get_statutory_parameters(_write(tmp_path, """
            version: "2025.1"
            section35:
              life_interest_years: 25
            hotchpot:
              default_inflation_rate: "0.07"
              minimum_adjustment: 1000
            debt:
              unsecured_limitation_years: 3
        """))
        assert params.section35.life_interest_years == 25
        assert params.hotchpot.default_inflation_rate == Decimal("0.07")
        assert params.minimum_hotchpot_adjustment == Decimal("1000")
        assert params.debt.unsecured_limitation_years == 3

    def test_partial_weight_table(self, tmp_path):
        params = get_statutory_parameters(_write(tmp_path, """
            version: "2025.1"
            dependency:
              relationship_weights:
                parent: "0.9"
        """))
        weights = params.dependency.relationship_weights
        assert weights[DependantRelationship.PARENT] == Decimal("0.9")
        assert weights[DependantRelationship.SPOUSE] == Decimal("1.0")


class TestRejection:

    @pytest.mark.parametrize(
        "text, match",
        [
            ("version: '1'\nhotchpot:\n  default_inflation_rate: 0.05\n", "write decimals as strings"),
            ("version: '1'\nsection35:\n  bogus: 1\n", "unknown keys"),
            ("version: '1'\nextra: 1\n", "unknown keys"),
            ("version: '1'\ncurrency: XYZ\n", "unsupported currency"),
            ("version: '1'\nsection35:\n  spousal_residue_fraction: '3/2'\n", "spousal_residue_fraction"),
            ("version: '1'\ndebt:\n  unsecured_limitation_years: six\n", "expected an integer"),
            ("version: '1'\nsection40:\n  minimum_houses: true\n", "expected an integer"),
            (
                "version: '1'\ndebt:\n  unsecured_limitation_years: 15\n",
                "secured_limitation_years cannot be shorter",
            ),
            ("version: '1'\nhotchpot:\n  minimum_adjustment: -5\n", "cannot be negative"),
        ],
    )
    def test_invalid_values(self, tmp_path, text, match):
        with pytest.raises(ValueError, match=match):
            get_statutory_parameters(_write(tmp_path, text))

    def test_missing_version(self):
        with pytest.raises(KeyError):
            parse_statutory_parameters({"jurisdiction": "KE"})

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_statutory_parameters(tmp_path / "absent.yaml")

    def test_malformed_yaml(self, tmp_path):
        with pytest.raises(yaml.YAMLError):
            get_statutory_parameters(_write(tmp_path, "version: [unclosed\n"))


class TestParseDecimal:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("0.05", Decimal("0.05")),
            (5, Decimal("5")),
            (" 1/4 ", Decimal("0.25")),
        ],
    )
    def test_accepted(self, raw, expected):
        assert parse_decimal(raw, "x") == expected

    @pytest.mark.parametrize("raw", [0.5, True, "abc", "1/0", None])
    def test_rejected(self, raw):
        with pytest.raises(ValueError):
            parse_decimal(raw, "x")
