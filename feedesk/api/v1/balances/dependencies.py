from fastapi import Depends

from feedesk.billing.engine import BalanceEngine
from feedesk.core.observability import Observability, get_observability


def get_balance_engine(observability: Observability = Depends(get_observability)) -> BalanceEngine:
    return BalanceEngine(observability=observability)
