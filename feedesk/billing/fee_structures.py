"""Resolve the base fee definition for a class in a quarter."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

from feedesk.billing.money import ZERO, to_money
from feedesk.core.models import FeeStructure
from feedesk.core.models.fee_structure import COMPONENT_FIELDS

logger = logging.getLogger(__name__)


def _recency_key(fs: FeeStructure):
    created = fs.created_at
    if created is not None and created.tzinfo is not None:
        created = created.replace(tzinfo=None)
    return (created or datetime.min, str(fs.id))


def resolve_fee_structure(
    class_id: UUID,
    quarter_id: UUID,
    structures: Iterable[FeeStructure],
) -> Optional[FeeStructure]:
    """
    Return the structure for (class_id, quarter_id), or None when the class has none for that quarter.
    Duplicates are a data problem upstream; the most recently created one wins (ties broken by id)
    so the result is stable across calls.
    """
    matches = [fs for fs in structures if fs.class_id == class_id and fs.quarter_id == quarter_id]
    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(
            "%d fee structures match class %s quarter %s; using most recent",
            len(matches), class_id, quarter_id,
        )
    return max(matches, key=_recency_key)


def base_fee_of(structure: Optional[FeeStructure]) -> Decimal:
    if structure is None:
        return ZERO
    return to_money(structure.total_fee)


def component_total(**components) -> Decimal:
    """Sum of tuition/transport/activity/examination/other; unknown keys are ignored."""
    return sum((to_money(components.get(f)) for f in COMPONENT_FIELDS), ZERO)
