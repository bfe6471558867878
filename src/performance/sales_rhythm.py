"""Sales achievement and Recruitment Rhythm for one delegate-product assignment.

The remaining effort to close the year-end gap is modeled as a linear ramp
over the ``n`` remaining months: ``1*r, 2*r, ..., n*r``. Its sum ``r * D``
with ``D = n(n+1)/2`` must cover the gap, so the reported rhythm is
``r = ceil(gap / D)``. The rhythm is never negative.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Iterable, Sequence

from performance.exceptions import InvalidInput
from performance.records import MONTHS_PER_YEAR, SalesAssignmentRecord, validate_monthly_series
from performance.status import StatusLabel
from performance.utils import add_series, ceil_div, percent


@dataclass(frozen=True)
class SalesRhythm:
    as_of_month: int
    annual_target: Any
    ytd_target: Any
    ytd_achieved: Any
    achievement_rate: int
    gap: Any
    remaining_months: int
    triangular_denominator: int
    recruitment_rhythm: int
    ramp: list = field(default_factory=list)
    monthly_target: list = field(default_factory=list)
    monthly_achieved: list = field(default_factory=list)
    assignment_count: int = 1
    product_id: Any = None
    status_label: StatusLabel | None = None

    def with_status(self, policy) -> "SalesRhythm":
        return replace(self, status_label=policy.classify(self))

    def as_dict(self) -> dict:
        data = asdict(self)
        data["status_label"] = self.status_label.value if self.status_label else None
        return data


def triangular(n: int) -> int:
    return n * (n + 1) // 2 if n > 0 else 0


def compute_sales_rhythm(
    monthly_target: Sequence,
    monthly_achieved: Sequence,
    as_of_month: int,
    *,
    assignment_count: int = 1,
    product_id=None,
) -> SalesRhythm:
    """Compute YTD achievement and Recruitment Rhythm as of ``as_of_month``."""
    if isinstance(as_of_month, bool) or not isinstance(as_of_month, int) or not 1 <= as_of_month <= 12:
        raise InvalidInput(f"Mois invalide: {as_of_month!r} (attendu 1..12).")
    targets = validate_monthly_series(monthly_target, "monthly_target")
    achieved = validate_monthly_series(monthly_achieved, "monthly_achieved")

    annual_target = sum(targets)
    ytd_target = sum(targets[:as_of_month])
    ytd_achieved = sum(achieved[:as_of_month])
    gap = max(0, annual_target - ytd_achieved)

    remaining = MONTHS_PER_YEAR - as_of_month
    denominator = triangular(remaining)
    if remaining <= 0 or denominator == 0 or gap == 0:
        rhythm = 0
    else:
        rhythm = ceil_div(gap, denominator)

    return SalesRhythm(
        as_of_month=as_of_month,
        annual_target=annual_target,
        ytd_target=ytd_target,
        ytd_achieved=ytd_achieved,
        achievement_rate=percent(ytd_achieved, ytd_target),
        gap=gap,
        remaining_months=remaining,
        triangular_denominator=denominator,
        recruitment_rhythm=rhythm,
        ramp=[step * rhythm for step in range(1, remaining + 1)],
        monthly_target=list(targets),
        monthly_achieved=list(achieved),
        assignment_count=assignment_count,
        product_id=product_id,
    )


def compute_assignment_rhythm(assignment: SalesAssignmentRecord, as_of_month: int) -> SalesRhythm:
    return compute_sales_rhythm(
        assignment.monthly_target,
        assignment.monthly_achieved,
        as_of_month,
        product_id=assignment.product_id,
    )


def pool_sales_assignments(
    assignments: Iterable[SalesAssignmentRecord],
    as_of_month: int,
    *,
    product_id=None,
) -> SalesRhythm:
    """Sum the target/achieved arrays first, then run the calculator once."""
    assignments = list(assignments)
    if not assignments:
        zeros = [0] * MONTHS_PER_YEAR
        return compute_sales_rhythm(
            zeros, zeros, as_of_month, assignment_count=0, product_id=product_id,
        )
    years = {assignment.year for assignment in assignments}
    if len(years) > 1:
        raise InvalidInput(f"Impossible de cumuler plusieurs annees: {sorted(years)}.")
    targets = add_series(*(assignment.monthly_target for assignment in assignments))
    achieved = add_series(*(assignment.monthly_achieved for assignment in assignments))
    return compute_sales_rhythm(
        targets,
        achieved,
        as_of_month,
        assignment_count=len(assignments),
        product_id=product_id,
    )
