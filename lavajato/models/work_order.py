from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .catalog import Service
from .common import CamelModel, Money


# ----------------------------------------------------
# 1. ENUMERADOR DE STATUS
# Os valores são os textos gravados no banco e enviados na API.
# ----------------------------------------------------
class WorkOrderStatus(str, Enum):
    """Etapas de uma Ordem de Serviço, na ordem do fluxo normal."""
    WAITING = "Aguardando"
    IN_PROGRESS = "Em Andamento"
    FINISHED = "Finalizado"
    DELIVERED = "Entregue"


class PaymentMethod(str, Enum):
    PIX = "pix"
    CREDIT = "credit"
    DEBIT = "debit"
    CASH = "cash"


# ----------------------------------------------------
# 2. ENTRADAS
# ----------------------------------------------------
class WorkOrderCreate(CamelModel):
    customer_id: int
    vehicle_id: int
    service_ids: List[int] = Field(..., min_length=1, description="IDs dos serviços do catálogo.")
    employee: Optional[str] = None
    damage_log: Optional[str] = Field(None, description="Avarias anotadas no check-in.")


class WorkOrderStatusUpdate(CamelModel):
    status: WorkOrderStatus
    # Ausente = mantém o valor atual
    is_paid: Optional[bool] = None
    payment_method: Optional[PaymentMethod] = None


# ----------------------------------------------------
# 3. SAÍDA
# ----------------------------------------------------
class WorkOrder(CamelModel):
    id: int
    customer_id: int
    vehicle_id: int
    services: List[Service]
    employee: Optional[str] = None
    status: WorkOrderStatus
    checkin_time: datetime
    checkout_time: Optional[datetime] = None
    damage_log: Optional[str] = None
    total: Money
    is_paid: bool
    payment_method: Optional[PaymentMethod] = None
