"""
Extra charge scoping and aggregation.

A charge applies to exactly one of: a single student, every student of a class, or the whole school.
Scope and quarter are independent filters and both must match.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Union
from uuid import UUID

from feedesk.billing.money import money_sum
from feedesk.core.enums import ChargeScopeType
from feedesk.core.models import ExtraCharge


@dataclass(frozen=True)
class Individual:
    student_id: UUID

    def covers(self, student_id: UUID, class_id: UUID) -> bool:
        return self.student_id == student_id


@dataclass(frozen=True)
class ClassWide:
    class_id: UUID

    def covers(self, student_id: UUID, class_id: UUID) -> bool:
        return self.class_id == class_id


@dataclass(frozen=True)
class SchoolWide:
    def covers(self, student_id: UUID, class_id: UUID) -> bool:
        return True


ChargeScope = Union[Individual, ClassWide, SchoolWide]


def scope_of(charge: ExtraCharge) -> ChargeScope:
    """
    Read the scope of a stored charge. Rows without an explicit scope column value are classified
    by which foreign key is set (student first), with neither meaning school-wide.
    """
    scope = (charge.scope or "").upper()
    if scope == ChargeScopeType.INDIVIDUAL.value or (not scope and charge.student_id is not None):
        return Individual(charge.student_id)
    if scope == ChargeScopeType.CLASS.value or (not scope and charge.class_id is not None):
        return ClassWide(charge.class_id)
    return SchoolWide()


def applicable_charges(
    student_id: UUID,
    class_id: UUID,
    quarter_id: UUID,
    charges: Iterable[ExtraCharge],
) -> List[ExtraCharge]:
    return [
        c for c in charges
        if c.quarter_id == quarter_id and scope_of(c).covers(student_id, class_id)
    ]


def sum_extra_charges(
    student_id: UUID,
    class_id: UUID,
    quarter_id: UUID,
    charges: Iterable[ExtraCharge],
) -> Decimal:
    return money_sum(c.amount for c in applicable_charges(student_id, class_id, quarter_id, charges))


def scope_label(charge: ExtraCharge) -> str:
    scope = scope_of(charge)
    if isinstance(scope, Individual):
        return ChargeScopeType.INDIVIDUAL.value
    if isinstance(scope, ClassWide):
        return ChargeScopeType.CLASS.value
    return ChargeScopeType.SCHOOL.value
