"""
Cadastro de clientes e veículos.
"""
import io
import logging
from typing import List, Optional, Tuple

import openpyxl
from sqlalchemy.orm import Session, selectinload

from lavajato.database import transaction
from lavajato.database_models import Customer, Service, Vehicle, WorkOrder
from lavajato.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def normalize_plate(plate: str) -> str:
    return str(plate).upper().strip()


class CustomerRegistry:
    def __init__(self, db: Session):
        self.db = db

    # ============================================
    # CLIENTES
    # ============================================

    def find_customer(self, customer_id: int) -> Customer:
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise NotFoundError("Cliente", customer_id)
        return customer

    def list_customers(self) -> List[Customer]:
        return (
            self.db.query(Customer)
            .options(
                selectinload(Customer.vehicles),
                selectinload(Customer.work_orders)
                .selectinload(WorkOrder.services)
                .selectinload(Service.products_consumed),
            )
            .order_by(Customer.name)
            .all()
        )

    def list_work_orders_for_customer(self, customer_id: int) -> List[WorkOrder]:
        """Histórico do cliente, do check-in mais recente para o mais antigo."""
        return (
            self.db.query(WorkOrder)
            .options(selectinload(WorkOrder.services).selectinload(Service.products_consumed))
            .filter(WorkOrder.customer_id == customer_id)
            .order_by(WorkOrder.checkin_time.desc(), WorkOrder.id.desc())
            .all()
        )

    def register_customer(self, customer_data: dict, vehicles: Optional[list] = None) -> Customer:
        """Cria o cliente e seus veículos numa única transação."""
        vehicles = vehicles or []
        with transaction(self.db):
            customer = Customer(**customer_data)
            self.db.add(customer)
            self.db.flush()

            seen_plates = set()
            for vehicle_data in vehicles:
                plate = normalize_plate(vehicle_data["plate"])
                if plate in seen_plates:
                    raise ValidationError(f"A placa '{plate}' foi informada mais de uma vez.")
                seen_plates.add(plate)
                self._check_plate_available(plate)
                customer.vehicles.append(Vehicle(**{**vehicle_data, "plate": plate}))

        self.db.refresh(customer)
        logger.info("Cliente cadastrado: %s (%d veículo(s))", customer.name, len(customer.vehicles))
        return customer

    def update_customer(self, customer_id: int, customer_data: dict) -> Customer:
        with transaction(self.db):
            customer = self.find_customer(customer_id)
            for key, value in customer_data.items():
                setattr(customer, key, value)
        self.db.refresh(customer)
        return customer

    def delete_customer(self, customer_id: int) -> None:
        # Graças ao cascade dos modelos, veículos e ordens de serviço vão junto
        with transaction(self.db):
            customer = self.find_customer(customer_id)
            self.db.delete(customer)
        logger.info("Cliente %s excluído", customer_id)

    # ============================================
    # VEÍCULOS
    # ============================================

    def find_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = self.db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
        if not vehicle:
            raise NotFoundError("Veículo", vehicle_id)
        return vehicle

    def list_vehicles(self) -> List[Vehicle]:
        return self.db.query(Vehicle).order_by(Vehicle.model).all()

    def create_vehicle(self, customer_id: int, vehicle_data: dict) -> Vehicle:
        with transaction(self.db):
            self.find_customer(customer_id)
            plate = normalize_plate(vehicle_data["plate"])
            self._check_plate_available(plate)
            vehicle = Vehicle(customer_id=customer_id, **{**vehicle_data, "plate": plate})
            self.db.add(vehicle)
        self.db.refresh(vehicle)
        return vehicle

    def update_vehicle(self, vehicle_id: int, vehicle_data: dict) -> Vehicle:
        with transaction(self.db):
            vehicle = self.find_vehicle(vehicle_id)

            customer_id = vehicle_data.pop("customer_id", None)
            if customer_id is not None:
                self.find_customer(customer_id)
                vehicle.customer_id = customer_id

            plate = normalize_plate(vehicle_data.pop("plate", vehicle.plate))
            # Se a placa existe E o ID é diferente do veículo que estamos editando
            self._check_plate_available(plate, exclude_id=vehicle_id)
            vehicle.plate = plate

            for key, value in vehicle_data.items():
                setattr(vehicle, key, value)
        self.db.refresh(vehicle)
        return vehicle

    def delete_vehicle(self, vehicle_id: int) -> None:
        with transaction(self.db):
            vehicle = self.find_vehicle(vehicle_id)
            self.db.delete(vehicle)

    def import_vehicles(self, content: bytes) -> Tuple[int, int]:
        """
        Importa veículos de uma planilha .xlsx.
        Colunas: ID do cliente, modelo, placa, cor, observações (linha 1 = cabeçalho).
        Linhas com cliente inexistente, sem placa ou com placa repetida são ignoradas.
        Retorna (importados, ignorados).
        """
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(content))
        except Exception as e:
            raise ValidationError(f"Arquivo de planilha inválido: {e}")
        sheet = workbook.active
        rows = list(sheet.iter_rows(min_row=2, values_only=True))

        imported = skipped = 0
        with transaction(self.db):
            valid_customer_ids = {row.id for row in self.db.query(Customer.id).all()}
            known_plates = {row.plate for row in self.db.query(Vehicle.plate).all()}

            for row in rows:
                if not row or len(row) < 3 or row[0] is None or not row[2]:
                    skipped += 1
                    continue
                try:
                    customer_id = int(row[0])
                except (ValueError, TypeError):
                    skipped += 1
                    continue

                plate = normalize_plate(row[2])
                if not plate or customer_id not in valid_customer_ids or plate in known_plates:
                    skipped += 1
                    continue

                self.db.add(Vehicle(
                    customer_id=customer_id,
                    model=str(row[1]) if row[1] else "N/A",
                    plate=plate,
                    color=str(row[3]) if len(row) > 3 and row[3] else None,
                    observations=str(row[4]) if len(row) > 4 and row[4] else None,
                ))
                known_plates.add(plate)
                imported += 1

        logger.info("Importação de veículos: %d importado(s), %d ignorado(s)", imported, skipped)
        return imported, skipped

    def _check_plate_available(self, plate: str, exclude_id: Optional[int] = None) -> None:
        existing = self.db.query(Vehicle).filter(Vehicle.plate == plate).first()
        if existing and existing.id != exclude_id:
            raise ValidationError(f"A placa '{plate}' já está cadastrada.")
