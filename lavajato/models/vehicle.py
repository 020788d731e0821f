from typing import Optional

from pydantic import Field, field_validator

from .common import CamelModel


class VehicleBase(CamelModel):
    plate: str = Field(..., min_length=1, max_length=20, description="Placa do veículo.")
    model: str = Field(..., min_length=1)
    color: Optional[str] = None
    observations: Optional[str] = None

    @field_validator("plate")
    @classmethod
    def normalize_plate(cls, value: str) -> str:
        # Padroniza a placa (maiúsculas, sem espaços nas pontas)
        plate = value.upper().strip()
        if not plate:
            raise ValueError("A placa não pode ficar em branco.")
        return plate


class VehicleCreate(VehicleBase):
    customer_id: int # Chave estrangeira para o Cliente


class VehicleUpdate(VehicleBase):
    customer_id: Optional[int] = None


class Vehicle(VehicleBase):
    id: int
    customer_id: int


class VehicleImportResult(CamelModel):
    imported: int
    skipped: int
