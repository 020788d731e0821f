from datetime import date as date_type
from enum import Enum

from pydantic import Field

from .common import CamelModel, Money


class ExpenseCategory(str, Enum):
    PRODUCTS = "Produtos"
    SALARIES = "Salários"
    RENT = "Aluguel"
    MARKETING = "Marketing"
    OTHER = "Outros"


class ExpenseCreate(CamelModel):
    description: str = Field(..., min_length=1)
    category: ExpenseCategory
    amount: Money = Field(..., ge=0)
    date: date_type


class Expense(ExpenseCreate):
    id: int
