"""
Programa de fidelidade: a cada GOAL lavagens pagas o cliente ganha um
serviço de recompensa.

Existem duas fórmulas:

- "preserved" (padrão): a fórmula histórica do sistema. O contador de
  lavagens é calculado com módulo GOAL, então ``washes_since >= goal`` nunca
  é verdadeiro e a recompensa nunca aparece como disponível.
- "corrected" (LOYALTY_CORRECTED_FORMULA=true): recompensa disponível quando
  o número de lavagens pagas é múltiplo de GOAL e ainda não foi resgatada.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from lavajato.config import settings
from lavajato.database_models import Customer, WorkOrder
from lavajato.exceptions import ConfigurationError
from lavajato.models.loyalty import LoyaltyStatus
from lavajato.services.catalog import CatalogStore
from lavajato.services.registry import CustomerRegistry

logger = logging.getLogger(__name__)

PRESERVED = "preserved"
CORRECTED = "corrected"


@dataclass(frozen=True)
class LoyaltyCounts:
    paid_wash_count: int
    redemption_count: int
    washes_since_last_reward: int
    has_reward_available: bool


def compute_loyalty(
    history: Iterable[WorkOrder],
    wash_service_id: int,
    reward_service_id: int,
    goal: int,
    corrected: bool = False,
) -> LoyaltyCounts:
    history = list(history)

    paid_wash_count = sum(
        1 for wo in history
        if wo.is_paid
        and wo.total > 0
        and any(s.id == wash_service_id for s in wo.services)
    )
    # Resgates contam mesmo sem pagamento
    redemption_count = sum(
        1 for wo in history
        if any(s.id == reward_service_id for s in wo.services)
    )

    # O % do Python já devolve um resultado em [0, goal)
    washes_since = (paid_wash_count - redemption_count * goal) % goal

    if corrected:
        has_reward = (
            paid_wash_count % goal == 0
            and paid_wash_count > redemption_count * goal
        )
    else:
        has_reward = washes_since >= goal

    return LoyaltyCounts(
        paid_wash_count=paid_wash_count,
        redemption_count=redemption_count,
        washes_since_last_reward=washes_since,
        has_reward_available=has_reward,
    )


class LoyaltyEvaluator:
    def __init__(
        self,
        db: Session,
        wash_service_name: Optional[str] = None,
        reward_service_name: Optional[str] = None,
        goal: Optional[int] = None,
        corrected: Optional[bool] = None,
    ):
        self.catalog = CatalogStore(db)
        self.registry = CustomerRegistry(db)
        self.wash_service_name = wash_service_name or settings.LOYALTY_WASH_SERVICE_NAME
        self.reward_service_name = reward_service_name or settings.LOYALTY_REWARD_SERVICE_NAME
        self.goal = goal if goal is not None else settings.LOYALTY_GOAL
        if self.goal < 1:
            raise ConfigurationError(f"Meta de fidelidade inválida: {self.goal}")
        self.corrected = settings.LOYALTY_CORRECTED_FORMULA if corrected is None else corrected

    def evaluate(self, customer: Customer) -> LoyaltyStatus:
        # ConfigurationError se o programa não estiver cadastrado no catálogo
        wash = self.catalog.find_service_by_name(self.wash_service_name)
        reward = self.catalog.find_service_by_name(self.reward_service_name)

        history = self.registry.list_work_orders_for_customer(customer.id)
        counts = compute_loyalty(history, wash.id, reward.id, self.goal, self.corrected)

        washes_remaining = self.goal - counts.washes_since_last_reward
        if counts.has_reward_available:
            message = "reward available"
        else:
            message = f"{washes_remaining} washes remaining"

        return LoyaltyStatus(
            paid_wash_count=counts.paid_wash_count,
            redemption_count=counts.redemption_count,
            washes_since_last_reward=counts.washes_since_last_reward,
            washes_remaining=washes_remaining,
            goal=self.goal,
            progress=counts.washes_since_last_reward / self.goal * 100,
            has_reward_available=counts.has_reward_available,
            formula=CORRECTED if self.corrected else PRESERVED,
            wash_service_name=wash.name,
            reward_service_name=reward.name,
            message=message,
        )
