import logging
from datetime import date
from decimal import Decimal

import pytest

from cvrate.config import EngineSettings
from cvrate.errors import StrategyRegistrationError, UnsupportedRateTypeError
from cvrate.factory import create_interest_rate_service, create_rate_timeline, create_strategies
from cvrate.interest.dispatcher import RateStrategyDispatcher
from cvrate.interest.lookup import apply_discounts
from cvrate.schema import (
    ZERO_RESULT,
    CalculationInput,
    PlanDefinition,
    RateLookupResult,
    RateType,
)
from cvrate.timeline import CachedRateTimeline, InMemoryRateTimeline

from .conftest import PLAN, seed


def make_input(rate_type, begin=date(2021, 1, 1), end=date(2021, 3, 1), **kwargs):
    kwargs.setdefault("sub_account_plan_code", PLAN)
    kwargs.setdefault("principal_amount", 1000000)
    return CalculationInput(begin_date=begin, end_date=end, rate_type=rate_type, **kwargs)


class TestRateLookup:
    def test_apply_discounts_order(self):
        assert apply_discounts(Decimal("250"), Decimal("50"), Decimal("90")) == Decimal("180")
        assert apply_discounts(Decimal("250"), Decimal("0"), Decimal("100")) == Decimal("250")
        assert apply_discounts(Decimal("250"), Decimal("0"), Decimal("0")) == Decimal("250")
        assert apply_discounts(Decimal("250"), Decimal("0"), Decimal("33")) == Decimal("82.5")

    def test_lookup(self, rate_lookup, timeline):
        seed(timeline, PLAN, "2", [(date(2020, 1, 1), None, 250)])
        calc_input = make_input(RateType.LOAN_RATE_MONTHLY, rate_subtraction=50)
        assert rate_lookup.lookup_rate(calc_input, "2", date(2020, 6, 1)) == RateLookupResult(
            Decimal("250"), Decimal("200")
        )
        assert not rate_lookup.lookup_rate(calc_input, "2", date(2019, 6, 1)).found
        assert not rate_lookup.lookup_rate(
            calc_input.with_plan_code(None), "2", date(2020, 6, 1)
        ).found

    def test_resolve_prefers_known_rate(self, rate_lookup):
        calc_input = make_input(RateType.DIVIDEND_RATE, known_rate="1.5")
        assert rate_lookup.resolve_rate(calc_input, "0", date(2020, 1, 1)).adjusted_rate == Decimal("1.5")


class TestDispatcher:
    def test_covers_every_rate_type(self, strategies):
        dispatcher = RateStrategyDispatcher(strategies.values())
        assert dispatcher.supported_rate_types() == frozenset(RateType)
        assert type(dispatcher.dispatch(RateType.LOAN_RATE_MONTHLY_V2)).__name__ == "LoanRateStrategy"
        assert type(dispatcher.dispatch("c")).__name__ == "DepositRateStrategy"
        assert dispatcher.supports("F")
        assert not dispatcher.supports("Z")

    def test_unknown_rate_type(self, strategies):
        dispatcher = RateStrategyDispatcher(strategies.values())
        with pytest.raises(UnsupportedRateTypeError) as excinfo:
            dispatcher.dispatch("Z")
        assert "'Z'" in str(excinfo.value)
        assert "'C'" in str(excinfo.value)

    def test_incomplete_registration(self, strategies):
        partial = [s for name, s in strategies.items() if name != "FreeLookRateStrategy"]
        with pytest.raises(StrategyRegistrationError, match="A"):
            RateStrategyDispatcher(partial)

    def test_duplicate_registration(self, strategies):
        with pytest.raises(StrategyRegistrationError):
            RateStrategyDispatcher(list(strategies.values()) + [strategies["LoanRateStrategy"]])


class TestService:
    def test_rate_type_validation(self, service):
        with pytest.raises(ValueError):
            service.calculate_rate(make_input(None))
        with pytest.raises(UnsupportedRateTypeError):
            service.calculate_rate(make_input("Z"))

    def test_inverted_span_is_zero(self, service):
        calc_input = make_input(RateType.DIVIDEND_RATE, begin=date(2021, 3, 1), end=date(2021, 1, 1))
        assert service.calculate_rate(calc_input) == ZERO_RESULT

    def test_string_codes_resolve(self, service, timeline):
        seed(timeline, PLAN, "0", [(date(2020, 1, 1), None, 120)])
        assert service.calculate_rate(make_input("0")).effective_rate == Decimal("120")

    def test_investment_gate_falls_back_to_loan(self, service, timeline):
        seed(timeline, PLAN, "2", [(date(2020, 1, 1), None, 200)])
        seed(timeline, PLAN, "5", [(date(2020, 1, 1), None, 300)])
        calc_input = make_input(RateType.DEPOSIT_RATE)

        traditional = service.calculate_rate(calc_input, plan=PlanDefinition("TRAD", insurance_type_3="A"))
        investment = service.calculate_rate(calc_input, plan=PlanDefinition("INV", insurance_type_3="F"))
        assert traditional.effective_rate == Decimal("200")
        assert investment.effective_rate == Decimal("300")

    def test_investment_gate_without_plan_keeps_type(self, service, timeline, caplog):
        seed(timeline, PLAN, "5", [(date(2020, 1, 1), None, 300)])
        with caplog.at_level(logging.WARNING, logger="cvrate.interest.service"):
            result = service.calculate_rate(make_input(RateType.DEPOSIT_RATE))
        assert result.effective_rate == Decimal("300")
        assert "Investment-only" in caplog.text

    def test_declared_average_gate(self, service, timeline):
        seed(timeline, PLAN, "2", [(date(2020, 1, 1), None, 200)])
        seed(timeline, PLAN, "5", [(date(2020, 1, 1), None, 300)])
        calc_input = make_input(RateType.AVG_DECLARED_RATE)

        interest_sensitive = service.calculate_rate(calc_input, plan=PlanDefinition("ISL", insurance_type_3="I"))
        other = service.calculate_rate(calc_input, plan=PlanDefinition("TRAD", insurance_type_3="A"))
        assert interest_sensitive.effective_rate == Decimal("300")
        assert interest_sensitive.interest_amount == 0
        assert other.effective_rate == Decimal("200")
        assert other.interest_amount > 0

    def test_four_bank_runs_loan_first(self, service, strategies, timeline):
        seed(timeline, PLAN, "0", [(date(2020, 1, 1), None, 150)])
        seed(timeline, PLAN, "2", [(date(2020, 1, 1), None, 200)])
        calc_input = make_input(RateType.FOUR_BANK_RATE)

        result = service.calculate_rate(calc_input)
        direct = strategies["FourBankRateStrategy"].calculate(calc_input, loan_rate=Decimal("200"))
        assert result == direct
        assert result.effective_rate == Decimal("150")

    def test_four_bank_without_loan_rates(self, service, timeline):
        seed(timeline, PLAN, "0", [(date(2020, 1, 1), None, 150)])
        result = service.calculate_rate(make_input(RateType.FOUR_BANK_RATE))
        assert result.effective_rate == Decimal("150")
        assert result.interest_amount == 0

    def test_batch_replaces_failures_with_zero(self, service, timeline):
        seed(timeline, PLAN, "0", [(date(2020, 1, 1), None, 120)])
        results = service.calculate_rate_batch(
            [make_input(RateType.DIVIDEND_RATE), make_input("Z"), make_input(None)]
        )
        assert results[0].effective_rate == Decimal("120")
        assert results[1] == ZERO_RESULT
        assert results[2] == ZERO_RESULT

    def test_supported_rate_types(self, service):
        assert service.supports_rate_type(RateType.COMPOUND_RATE)
        assert len(service.supported_rate_types()) == 13


class TestConfigAndFactory:
    def test_defaults(self, monkeypatch):
        for name in (
            "CVRATE_CACHE_ENABLED",
            "CVRATE_CACHE_MAX_SIZE",
            "CVRATE_DEFAULT_SCALE",
            "CVRATE_LOG_LEVEL",
        ):
            monkeypatch.delenv(name, raising=False)
        assert EngineSettings.from_env() == EngineSettings()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CVRATE_CACHE_ENABLED", "false")
        monkeypatch.setenv("CVRATE_CACHE_MAX_SIZE", "50")
        monkeypatch.setenv("CVRATE_DEFAULT_SCALE", "2")
        monkeypatch.setenv("CVRATE_LOG_LEVEL", "debug")
        settings = EngineSettings.from_env()
        assert settings == EngineSettings(False, 50, 2, "DEBUG")

    def test_invalid_env(self, monkeypatch):
        monkeypatch.setenv("CVRATE_CACHE_ENABLED", "maybe")
        with pytest.raises(ValueError):
            EngineSettings.from_env()
        monkeypatch.setenv("CVRATE_CACHE_ENABLED", "1")
        monkeypatch.setenv("CVRATE_CACHE_MAX_SIZE", "0")
        with pytest.raises(ValueError):
            EngineSettings.from_env()

    def test_timeline_kind_follows_settings(self):
        assert isinstance(create_rate_timeline(EngineSettings()), CachedRateTimeline)
        assert isinstance(
            create_rate_timeline(EngineSettings(cache_enabled=False)), InMemoryRateTimeline
        )

    def test_service_default_scale(self):
        settings = EngineSettings(cache_enabled=True, default_scale=2)
        timeline = create_rate_timeline(settings)
        timeline.insert(PLAN, "2", date(2020, 6, 1), None, Decimal("300"))
        service = create_interest_rate_service(timeline, settings=settings)

        calc_input = make_input(
            RateType.LOAN_RATE_LAST_MONTH, begin=date(2020, 6, 1), end=date(2020, 6, 30)
        )
        assert service.calculate_rate(calc_input).interest_amount == Decimal("2459.02")
        assert service.calculate_rate(calc_input, output_scale=0).interest_amount == Decimal("2459")

    def test_strategy_set(self, timeline):
        assert len(create_strategies(timeline)) == 9
