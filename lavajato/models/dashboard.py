from pydantic import BaseModel, Field

from .common import CamelModel, Money


class DashboardStats(CamelModel):
    total_revenue: Money
    total_expenses: Money
    active_work_orders: int
    total_customers: int
    low_stock_products: int


class FinancialChartPoint(BaseModel):
    # Chaves em português: são as séries do gráfico do painel
    name: str
    receitas: Money = Field(..., serialization_alias="Receitas")
    custos: Money = Field(..., serialization_alias="Custos")


class ExpenseCategoryTotal(CamelModel):
    category: str
    total: Money
