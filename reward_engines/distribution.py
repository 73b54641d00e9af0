"""
reward_engines.distribution -- Split a project's surplus between company and members.

Responsibility:
    Floor the project's performance difference at zero, split it by the
    project's company/team percentages, and share the team pool among
    the members who beat their plan, in proportion to their efficiency.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes settlement.performance_diff and member efficiency rates.

Invariants enforced:
    - Overruns are absorbed: a negative performance_diff distributes 0.
    - Only members with efficiency_rate > 0 are eligible; everybody else
      gets share 0 and is left out of the denominator.
    - No share amount is negative.
    - company_share, team_share and each share_amount are rounded half
      away from zero to whole units, independently.  The sum of member
      shares may differ from team_share by at most one unit per eligible
      member (see ``rounding_residual``).

Failure modes:
    - ValueError if company_share_percent is outside [0, 100].

Usage:
    from reward_engines.distribution import distribute_reward

    result = distribute_reward(
        performance_diff=Decimal("640000"),
        company_share_percent=Decimal("80"),
        efficiencies=[("m-a", Decimal("20")), ("m-b", Decimal("-12.5"))],
    )
    result.share_for("m-a").share_amount  # Decimal("128000")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from reward_engines.tracer import traced_engine
from reward_kernel.domain.values import HUNDRED, ZERO, round_money, round_percent
from reward_kernel.logging_config import get_logger

logger = get_logger("engines.distribution")


@dataclass(frozen=True)
class MemberShare:
    """One member's part of the team pool."""

    member_id: str
    efficiency_rate: Decimal
    share_percent: Decimal
    share_amount: Decimal

    @property
    def is_eligible(self) -> bool:
        return self.share_percent > ZERO

    @property
    def reported_share_percent(self) -> Decimal:
        return round_percent(self.share_percent)


@dataclass(frozen=True)
class RewardDistribution:
    """Company/team split of a project's surplus."""

    performance_diff: Decimal
    company_share_percent: Decimal
    bonus_pool: Decimal
    company_share: Decimal
    team_share: Decimal
    shares: tuple[MemberShare, ...]

    @property
    def distributed_total(self) -> Decimal:
        return sum((s.share_amount for s in self.shares), ZERO)

    @property
    def rounding_residual(self) -> Decimal:
        """team_share minus what was actually handed to members."""
        return self.team_share - self.distributed_total

    @property
    def eligible_count(self) -> int:
        return sum(1 for s in self.shares if s.is_eligible)

    def share_for(self, member_id: str) -> MemberShare | None:
        for share in self.shares:
            if share.member_id == member_id:
                return share
        return None


@traced_engine(
    "distribution", "1.0",
    fingerprint_fields=("performance_diff", "company_share_percent", "efficiencies"),
)
def distribute_reward(
    performance_diff: Decimal,
    company_share_percent: Decimal,
    efficiencies: Sequence[tuple[str, Decimal]],
) -> RewardDistribution:
    """
    Distribute a project's surplus.

    Args:
        performance_diff: Actual minus planned performance of the project.
        company_share_percent: Company's percentage of the bonus pool (0-100).
        efficiencies: (member_id, efficiency_rate) for every member on the
            project, in display order.

    Returns:
        RewardDistribution with one MemberShare per input member.

    Raises:
        ValueError: If company_share_percent is outside [0, 100].
    """
    if not ZERO <= company_share_percent <= HUNDRED:
        raise ValueError(
            f"company_share_percent must be within [0, 100], got {company_share_percent}"
        )

    bonus_pool = max(performance_diff, ZERO)
    company_share = round_money(bonus_pool * company_share_percent / HUNDRED)
    team_share = round_money(bonus_pool * (HUNDRED - company_share_percent) / HUNDRED)

    total_eligible = sum((rate for _, rate in efficiencies if rate > ZERO), ZERO)
    distributable = total_eligible > ZERO and team_share > ZERO

    shares: list[MemberShare] = []
    for member_id, rate in efficiencies:
        if distributable and rate > ZERO:
            share_percent = rate / total_eligible * HUNDRED
            share_amount = round_money(team_share * share_percent / HUNDRED)
        else:
            share_percent = ZERO
            share_amount = ZERO
        shares.append(MemberShare(
            member_id=member_id,
            efficiency_rate=rate,
            share_percent=share_percent,
            share_amount=share_amount,
        ))

    if performance_diff < ZERO:
        logger.info("distribution_overrun_absorbed", extra={
            "performance_diff": str(performance_diff),
        })
    elif bonus_pool > ZERO and not distributable:
        logger.info("distribution_no_eligible_members", extra={
            "bonus_pool": str(bonus_pool),
            "team_share": str(team_share),
            "member_count": len(efficiencies),
        })

    result = RewardDistribution(
        performance_diff=performance_diff,
        company_share_percent=company_share_percent,
        bonus_pool=bonus_pool,
        company_share=company_share,
        team_share=team_share,
        shares=tuple(shares),
    )

    logger.info("distribution_calculated", extra={
        "bonus_pool": str(bonus_pool),
        "company_share": str(company_share),
        "team_share": str(team_share),
        "eligible_count": result.eligible_count,
        "distributed_total": str(result.distributed_total),
    })
    return result
