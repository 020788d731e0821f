from datetime import date
from typing import List, Optional

from pydantic import Field

from .common import CamelModel
from .vehicle import Vehicle, VehicleBase
from .work_order import WorkOrder


class CustomerBase(CamelModel):
    name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    birthday: Optional[date] = None


class CustomerCreate(CustomerBase):
    # Veículos cadastrados junto com o cliente (mesma transação)
    vehicles: List[VehicleBase] = Field(default_factory=list)


class CustomerUpdate(CustomerBase):
    pass


class Customer(CustomerBase):
    id: int
    vehicles: List[Vehicle] = []
    service_history: List[WorkOrder] = []
