"""
Motor de Ordens de Serviço (OS)

Cria as OS no check-in, controla o status e o pagamento e dá baixa no
estoque conforme a lista de materiais de cada serviço.

Observações de comportamento:
- As transições de status são livres (qualquer status -> qualquer status),
  a menos que ENFORCE_STATUS_TRANSITIONS esteja ligado.
- A baixa de estoque acontece uma única vez por OS, no primeiro pagamento.
- Excluir uma OS não devolve ao estoque o que já foi consumido.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from lavajato.config import settings
from lavajato.database import transaction
from lavajato.database_models import Service, WorkOrder
from lavajato.exceptions import NotFoundError, ValidationError
from lavajato.models.work_order import PaymentMethod, WorkOrderStatus
from lavajato.services.catalog import CatalogStore
from lavajato.services.registry import CustomerRegistry

logger = logging.getLogger(__name__)

# Status que registram a saída do veículo
CHECKOUT_STATUSES = {WorkOrderStatus.FINISHED, WorkOrderStatus.DELIVERED}

# Fluxo normal (só é aplicado com ENFORCE_STATUS_TRANSITIONS=true)
ALLOWED_TRANSITIONS = {
    WorkOrderStatus.WAITING: {WorkOrderStatus.IN_PROGRESS},
    WorkOrderStatus.IN_PROGRESS: {WorkOrderStatus.FINISHED},
    WorkOrderStatus.FINISHED: {WorkOrderStatus.DELIVERED},
    WorkOrderStatus.DELIVERED: set(),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkOrderEngine:
    def __init__(
        self,
        db: Session,
        clock: Optional[Callable[[], datetime]] = None,
        enforce_transitions: Optional[bool] = None,
    ):
        self.db = db
        self.catalog = CatalogStore(db)
        self.registry = CustomerRegistry(db)
        self.clock = clock or utcnow
        if enforce_transitions is None:
            enforce_transitions = settings.ENFORCE_STATUS_TRANSITIONS
        self.enforce_transitions = enforce_transitions

    # ============================================
    # CONSULTAS
    # ============================================

    def get(self, work_order_id: int) -> WorkOrder:
        work_order = (
            self.db.query(WorkOrder)
            .options(selectinload(WorkOrder.services).selectinload(Service.products_consumed))
            .filter(WorkOrder.id == work_order_id)
            .first()
        )
        if not work_order:
            raise NotFoundError("Ordem de serviço", work_order_id)
        return work_order

    def list(self) -> List[WorkOrder]:
        return (
            self.db.query(WorkOrder)
            .options(selectinload(WorkOrder.services).selectinload(Service.products_consumed))
            .order_by(WorkOrder.checkin_time.desc(), WorkOrder.id.desc())
            .all()
        )

    # ============================================
    # CRIAÇÃO (CHECK-IN)
    # ============================================

    def create(
        self,
        customer_id: int,
        vehicle_id: int,
        service_ids: Iterable[int],
        employee: Optional[str] = None,
        damage_log: Optional[str] = None,
    ) -> WorkOrder:
        """
        Abre uma OS. O total é a soma dos preços dos serviços neste momento
        e não é recalculado depois. Cabeçalho e serviços são gravados juntos:
        se algo falhar, nada fica salvo.
        """
        service_ids = list(service_ids)
        if not service_ids:
            raise ValidationError("Selecione ao menos um serviço.")

        with transaction(self.db):
            # 1. Cliente e veículo precisam existir e estar ligados
            customer = self.registry.find_customer(customer_id)
            vehicle = self.registry.find_vehicle(vehicle_id)
            if vehicle.customer_id != customer.id:
                raise ValidationError(
                    f"O veículo {vehicle.plate} não pertence ao cliente {customer.name}."
                )

            # 2. Resolve os serviços no catálogo (falha se algum ID não existir)
            services = self.catalog.resolve_services(service_ids)
            total = sum((Decimal(service.price) for service in services), Decimal("0"))

            # 3. Cria a OS com os serviços associados
            work_order = WorkOrder(
                customer_id=customer.id,
                vehicle_id=vehicle.id,
                employee=employee,
                damage_log=damage_log,
                status=WorkOrderStatus.WAITING.value,
                checkin_time=self.clock(),
                total=total,
                is_paid=False,
            )
            work_order.services = services
            self.db.add(work_order)
            self.db.flush()

        logger.info(
            "OS #%s aberta para o veículo %s (total R$ %s)",
            work_order.id, vehicle.plate, total,
        )
        return self.get(work_order.id)

    # ============================================
    # STATUS E PAGAMENTO
    # ============================================

    def update_status(
        self,
        work_order_id: int,
        status: WorkOrderStatus,
        is_paid: Optional[bool] = None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> WorkOrder:
        try:
            status = WorkOrderStatus(status)
        except ValueError:
            raise ValidationError(f"Status inválido: {status}")
        if payment_method is not None:
            try:
                payment_method = PaymentMethod(payment_method)
            except ValueError:
                raise ValidationError(f"Forma de pagamento inválida: {payment_method}")

        with transaction(self.db):
            work_order = self.get(work_order_id)
            current = WorkOrderStatus(work_order.status)
            self._check_transition(current, status)

            work_order.status = status.value
            # Finalizado/Entregue registram a saída; os demais limpam o horário
            if status in CHECKOUT_STATUSES:
                work_order.checkout_time = self.clock()
            else:
                work_order.checkout_time = None

            if is_paid is not None:
                work_order.is_paid = is_paid
            if payment_method is not None:
                work_order.payment_method = payment_method.value

            # Baixa de estoque só no primeiro pagamento da OS
            if work_order.is_paid and work_order.stock_consumed_at is None:
                self.consume_inventory(work_order)
                work_order.stock_consumed_at = self.clock()

        logger.info(
            "OS #%s: %s -> %s (pago=%s)",
            work_order_id, current.value, status.value, work_order.is_paid,
        )
        return self.get(work_order_id)

    def consume_inventory(self, work_order: WorkOrder) -> None:
        """Debita do estoque os insumos de cada serviço da OS."""
        for service in work_order.services:
            for entry in service.products_consumed:
                self.catalog.decrement_stock(entry.product_id, entry.quantity)
        logger.info("OS #%s: baixa de estoque realizada", work_order.id)

    def _check_transition(self, current: WorkOrderStatus, new: WorkOrderStatus) -> None:
        if not self.enforce_transitions or current == new:
            return
        if new not in ALLOWED_TRANSITIONS[current]:
            raise ValidationError(
                f"Transição de status não permitida: {current.value} -> {new.value}"
            )

    # ============================================
    # EXCLUSÃO
    # ============================================

    def delete(self, work_order_id: int) -> None:
        # Não há estorno: o estoque consumido continua baixado
        with transaction(self.db):
            work_order = self.get(work_order_id)
            self.db.delete(work_order)
        logger.info("OS #%s excluída", work_order_id)
