"""Tests for config loading and CLI > config > default resolution."""

from datetime import date

import pytest

from retirement_mc.config import (
    DEFAULTS,
    build_household,
    build_parameters,
    create_parser,
    load_config,
    parse_seed,
    resolve,
)

TOML = """
monthly_expenses = 4200
net_worth = 650000

[primary]
birth_date = 1964-05-20
income = 90000
retirement_age = 62
registered = 300000

[spouse]
birth_date = "1967-11-02"
income = 45000
pension_start_age = 70
pension_at_70 = 1100

[simulation]
simulations = 250
volatility = 0.12
seed = false
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "retirement.toml"
    path.write_text(TOML)
    return path


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "nope.toml") == {}

    def test_flattens_tables(self, config_file):
        raw = load_config(config_file)
        assert raw["monthly_expenses"] == 4200
        assert raw["income"] == 90000
        assert raw["spouse_income"] == 45000
        assert raw["spouse_pension_start_age"] == 70
        assert raw["simulations"] == 250

    def test_dates_as_iso_strings(self, config_file):
        raw = load_config(config_file)
        assert raw["birth_date"] == "1964-05-20"
        assert raw["spouse_birth_date"] == "1967-11-02"

    def test_seed_false_means_random(self, config_file):
        assert load_config(config_file)["seed"] == "none"

    def test_malformed_exits(self, tmp_path, capsys):
        path = tmp_path / "bad.toml"
        path.write_text("monthly_expenses = = 3")
        with pytest.raises(SystemExit) as exc:
            load_config(path)
        assert exc.value.code == 1
        assert "bad.toml" in capsys.readouterr().err


class TestResolve:
    def test_defaults_only(self):
        args = create_parser("test").parse_args([])
        r = resolve(args, {})
        assert r == DEFAULTS

    def test_config_over_default(self, config_file):
        args = create_parser("test").parse_args([])
        r = resolve(args, load_config(config_file))
        assert r["retirement_age"] == 62
        assert r["volatility"] == 0.12
        assert r["expected_return"] == DEFAULTS["expected_return"]

    def test_cli_over_config(self, config_file):
        args = create_parser("test").parse_args([
            "--retirement-age", "67", "--spouse-income", "50000", "--no-sequence-risk",
        ])
        r = resolve(args, load_config(config_file))
        assert r["retirement_age"] == 67
        assert r["spouse_income"] == 50000.0
        assert r["sequence_risk"] is False

    def test_cli_seed_none(self, config_file):
        args = create_parser("test").parse_args(["--seed", "none"])
        r = resolve(args, {})
        assert build_parameters(r).seed is None


class TestParseSeed:
    @pytest.mark.parametrize("v", [None, False, "none", "None", "random", ""])
    def test_unseeded(self, v):
        assert parse_seed(v) is None

    def test_integer(self):
        assert parse_seed("7") == 7
        assert parse_seed(7) == 7

    def test_garbage(self):
        with pytest.raises(ValueError):
            parse_seed("abc")


class TestBuilders:
    def test_household_from_config(self, config_file):
        args = create_parser("test").parse_args([])
        r = resolve(args, load_config(config_file))
        h = build_household(r, as_of=date(2026, 1, 1))
        assert h.primary.birth_date == date(1964, 5, 20)
        assert h.primary.registered_balance == 300000
        assert h.spouse is not None
        assert h.spouse.government_pension_start_age == 70
        assert h.spouse.government_pension_monthly_at_70 == 1100
        assert h.monthly_expenses == 4200
        assert h.initial_capital == 650000
        assert h.current_age == 61

    def test_no_spouse_without_birth_date(self):
        r = resolve(create_parser("test").parse_args([]), {})
        h = build_household(r, as_of=date(2026, 1, 1))
        assert h.spouse is None
        assert h.net_worth is None
        assert h.current_age == 60

    def test_parameters_from_config(self, config_file):
        r = resolve(create_parser("test").parse_args([]), load_config(config_file))
        p = build_parameters(r)
        assert p.number_of_simulations == 250
        assert p.return_volatility == 0.12
        assert p.seed is None
        assert p.crash_magnitude == -0.35

    def test_default_parameters(self):
        r = resolve(create_parser("test").parse_args([]), {})
        p = build_parameters(r)
        assert p.seed == 42
        assert p.sequence_risk is True
        assert p.stochastic_inflation is False
