from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from .common import CamelModel, Money, Quantity


# ----------------------------------------------------
# 1. PRODUTOS (insumos de estoque)
# ----------------------------------------------------
class ProductBase(CamelModel):
    name: str = Field(..., min_length=1)
    supplier: Optional[str] = None
    cost: Money = Field(Decimal("0"), ge=0, description="Custo unitário.")
    stock: Quantity = Field(Decimal("0"), description="Quantidade atual em estoque.")
    min_stock: Quantity = Field(Decimal("0"), ge=0, description="Estoque mínimo antes do alerta.")


class ProductCreate(ProductBase):
    pass


class ProductUpdate(CamelModel):
    """Atualização parcial: campos ausentes mantêm o valor atual."""
    name: Optional[str] = Field(None, min_length=1)
    supplier: Optional[str] = None
    cost: Optional[Money] = Field(None, ge=0)
    stock: Optional[Quantity] = None
    min_stock: Optional[Quantity] = Field(None, ge=0)


class Product(ProductBase):
    id: int
    low_stock: bool


# ----------------------------------------------------
# 2. SERVIÇOS (com lista de materiais)
# ----------------------------------------------------
class ProductConsumption(CamelModel):
    product_id: int
    quantity: Quantity = Field(..., gt=0, description="Quantidade debitada do estoque por execução.")


class ServiceCreate(CamelModel):
    name: str = Field(..., min_length=1)
    price: Money = Field(..., ge=0, description="Preço cobrado pelo serviço.")
    products_consumed: List[ProductConsumption] = Field(default_factory=list)


class ServiceUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[Money] = Field(None, ge=0)
    # None mantém a lista atual; lista vazia remove todos os insumos
    products_consumed: Optional[List[ProductConsumption]] = None


class Service(CamelModel):
    id: int
    name: str
    price: Money
    products_consumed: List[ProductConsumption] = []
