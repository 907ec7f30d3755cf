"""Unit tests for domain/metrics/compliance.py."""

from datetime import datetime, timezone

import pytest

from journal_analytics.domain.metrics.compliance import (
    correlate_compliance,
    rule_compliance_rates,
    trade_compliance_rates,
)
from journal_analytics.domain.models import (
    ComplianceObservation,
    Direction,
    Outcome,
    Trade,
    determine_outcome,
)


def trade(trade_id: str, pnl: float) -> Trade:
    return Trade(
        symbol="ES",
        direction=Direction.SHORT,
        entry_price=5000.0,
        exit_price=5000.0 - pnl,
        quantity=1.0,
        outcome=determine_outcome(pnl),
        pnl=pnl,
        entry_time=datetime(2024, 6, 3, tzinfo=timezone.utc),
        trade_id=trade_id,
    )


def observe(trade_id: str, *followed: bool) -> list[ComplianceObservation]:
    return [
        ComplianceObservation(trade_id, f"Rule {i}", f, rule_id=f"r{i}")
        for i, f in enumerate(followed)
    ]


class TestTradeRates:
    """Tests for trade_compliance_rates."""

    def test_rates(self):
        obs = observe("a", True, True, False, True) + observe("b", False)
        rates = trade_compliance_rates(obs)
        assert rates == {"a": pytest.approx(0.75), "b": 0.0}


class TestCorrelation:
    """Tests for correlate_compliance."""

    def test_buckets(self):
        trades = [
            trade("a", -100),   # 5/5 followed
            trade("b", -50),    # 4/5 followed, at threshold
            trade("c", -300),   # 1/2 followed
            trade("d", -999),   # no observations
            trade("e", 200),    # win, ignored
        ]
        obs = (
            observe("a", True, True, True, True, True)
            + observe("b", True, True, True, True, False)
            + observe("c", True, False)
            + observe("e", False)
        )
        result = correlate_compliance(trades, obs)

        assert result.compliant_loss_count == 2
        assert result.non_compliant_loss_count == 1
        assert result.avg_loss_compliant == pytest.approx(-75.0)
        assert result.avg_loss_non_compliant == pytest.approx(-300.0)
        # 10 followed of 13
        assert result.overall_compliance_rate == pytest.approx(10 / 13)

    def test_custom_threshold(self):
        trades = [trade("b", -50)]
        obs = observe("b", True, True, True, True, False)
        result = correlate_compliance(trades, obs, threshold=0.9)
        assert result.compliant_loss_count == 0
        assert result.non_compliant_loss_count == 1

    def test_loss_without_pnl_not_bucketed(self):
        unpriced = Trade(
            symbol="ES",
            direction=Direction.LONG,
            entry_price=5000.0,
            exit_price=None,
            quantity=1.0,
            outcome=Outcome.LOSS,
            pnl=None,
            entry_time=datetime(2024, 6, 3, tzinfo=timezone.utc),
            trade_id="b",
        )
        obs = observe("a", True) + observe("b", True)
        result = correlate_compliance([trade("a", -10), unpriced], obs)
        assert result.compliant_loss_count == 1
        assert result.avg_loss_compliant == pytest.approx(-10.0)

    def test_no_observations(self):
        result = correlate_compliance([trade("a", -10)], [])
        assert result.avg_loss_compliant is None
        assert result.avg_loss_non_compliant is None
        assert result.overall_compliance_rate is None


class TestRuleRates:
    """Tests for rule_compliance_rates."""

    def test_most_broken_first(self):
        obs = (
            observe("a", True, False)
            + observe("b", True, False)
            + observe("c", True, True)
        )
        rules = rule_compliance_rates(obs)
        assert [r.rule for r in rules] == ["r1", "r0"]
        assert rules[0].followed == 1
        assert rules[0].total == 3
        assert rules[1].rate == 1.0

    def test_groups_by_text_without_id(self):
        obs = [
            ComplianceObservation("a", "Wait for close", True),
            ComplianceObservation("b", "Wait for close", False),
        ]
        [rule] = rule_compliance_rates(obs)
        assert rule.rule == "Wait for close"
        assert rule.rate == 0.5
