"""Compliance Metrics: Does following the rules shrink the losses?

Each trade can carry observations of whether the rules of its strategy
were followed. A trade's compliance rate is followed / observed over its
own observations; losing trades are split at a threshold (default 80%)
and the average loss of each side is compared.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Sequence

from journal_analytics.domain.models import ComplianceObservation, Outcome, Trade

COMPLIANCE_THRESHOLD = 0.8


@dataclass(frozen=True, slots=True)
class ComplianceCorrelation:
    """Loss magnitude split by rule compliance.

    Attributes:
        avg_loss_compliant: Mean PNL of losses with rate >= threshold
        avg_loss_non_compliant: Mean PNL of losses with rate < threshold
        overall_compliance_rate: Followed / total over all observations
        compliant_loss_count: Losses in the compliant bucket
        non_compliant_loss_count: Losses in the non-compliant bucket
    """
    avg_loss_compliant: float | None
    avg_loss_non_compliant: float | None
    overall_compliance_rate: float | None
    compliant_loss_count: int = 0
    non_compliant_loss_count: int = 0


@dataclass(frozen=True, slots=True)
class RuleCompliance:
    """How often a single rule was followed."""
    rule: str
    followed: int
    total: int

    @property
    def rate(self) -> float:
        return self.followed / self.total if self.total else 0.0


def trade_compliance_rates(
    observations: Sequence[ComplianceObservation],
) -> dict[str, float]:
    """Compliance rate per trade id."""
    counts: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    for obs in observations:
        entry = counts[obs.trade_id]
        entry[1] += 1
        if obs.followed:
            entry[0] += 1
    return {trade_id: followed / total for trade_id, (followed, total) in counts.items()}


def correlate_compliance(
    trades: Sequence[Trade],
    observations: Sequence[ComplianceObservation],
    threshold: float = COMPLIANCE_THRESHOLD,
) -> ComplianceCorrelation:
    """Average loss of rule-compliant vs non-compliant losing trades.

    Losing trades with no observations, or with no recorded PNL, belong to
    neither bucket.

    Args:
        trades: Trade snapshot (only losses are bucketed)
        observations: Compliance observations keyed by trade_id
        threshold: Minimum per-trade rate to count as compliant

    Returns:
        ComplianceCorrelation
    """
    rates = trade_compliance_rates(observations)

    compliant: list[float] = []
    non_compliant: list[float] = []
    for t in trades:
        if t.outcome != Outcome.LOSS or t.pnl is None or t.trade_id not in rates:
            continue
        bucket = compliant if rates[t.trade_id] >= threshold else non_compliant
        bucket.append(t.pnl)

    followed = sum(1 for o in observations if o.followed)
    overall = followed / len(observations) if observations else None

    return ComplianceCorrelation(
        avg_loss_compliant=sum(compliant) / len(compliant) if compliant else None,
        avg_loss_non_compliant=(
            sum(non_compliant) / len(non_compliant) if non_compliant else None
        ),
        overall_compliance_rate=overall,
        compliant_loss_count=len(compliant),
        non_compliant_loss_count=len(non_compliant),
    )


def rule_compliance_rates(
    observations: Sequence[ComplianceObservation],
) -> list[RuleCompliance]:
    """Follow rate per rule, most-broken rule first."""
    counts: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    for obs in observations:
        entry = counts[obs.rule_key]
        entry[1] += 1
        if obs.followed:
            entry[0] += 1

    rules = [
        RuleCompliance(rule=rule, followed=followed, total=total)
        for rule, (followed, total) in counts.items()
    ]
    return sorted(rules, key=lambda r: r.rate)
