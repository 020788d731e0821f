"""
Números do painel (dashboard): receitas, despesas, OS ativas e estoque.
"""
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from lavajato.database_models import Customer, Expense, Product, WorkOrder
from lavajato.models.dashboard import DashboardStats, ExpenseCategoryTotal, FinancialChartPoint
from lavajato.models.expense import ExpenseCategory
from lavajato.models.work_order import WorkOrderStatus

MONTH_NAMES = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"]


def _last_months(today: date, months: int) -> List[Tuple[int, int]]:
    """(ano, mês) dos últimos `months` meses, terminando no mês de `today`."""
    result = []
    year, month = today.year, today.month
    for _ in range(months):
        result.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(result))


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def stats(self) -> DashboardStats:
        total_revenue = self.db.query(func.sum(WorkOrder.total)).filter(WorkOrder.is_paid.is_(True)).scalar()
        total_expenses = self.db.query(func.sum(Expense.amount)).scalar()
        active = (
            self.db.query(func.count(WorkOrder.id))
            .filter(WorkOrder.status != WorkOrderStatus.DELIVERED.value)
            .scalar()
        )
        customers = self.db.query(func.count(Customer.id)).scalar()
        low_stock = self.db.query(func.count(Product.id)).filter(Product.stock < Product.min_stock).scalar()

        return DashboardStats(
            total_revenue=Decimal(total_revenue or 0),
            total_expenses=Decimal(total_expenses or 0),
            active_work_orders=active or 0,
            total_customers=customers or 0,
            low_stock_products=low_stock or 0,
        )

    def financial_chart(self, months: int = 6, today: Optional[date] = None) -> List[FinancialChartPoint]:
        """Receitas (OS pagas, pelo mês do check-in) e custos (despesas) por mês."""
        today = today or date.today()
        periods = _last_months(today, months)
        first_year, first_month = periods[0]
        start = date(first_year, first_month, 1)

        revenue: Dict[Tuple[int, int], Decimal] = defaultdict(Decimal)
        paid_orders = (
            self.db.query(WorkOrder.checkin_time, WorkOrder.total)
            .filter(WorkOrder.is_paid.is_(True))
            .all()
        )
        for checkin_time, total in paid_orders:
            if checkin_time.date() >= start:
                revenue[(checkin_time.year, checkin_time.month)] += Decimal(total)

        costs: Dict[Tuple[int, int], Decimal] = defaultdict(Decimal)
        for expense_date, amount in self.db.query(Expense.date, Expense.amount).filter(Expense.date >= start).all():
            costs[(expense_date.year, expense_date.month)] += Decimal(amount)

        return [
            FinancialChartPoint(
                name=MONTH_NAMES[month - 1],
                receitas=revenue[(year, month)],
                custos=costs[(year, month)],
            )
            for year, month in periods
        ]

    def expense_breakdown(self) -> List[ExpenseCategoryTotal]:
        totals = dict(
            self.db.query(Expense.category, func.sum(Expense.amount))
            .group_by(Expense.category)
            .all()
        )
        return [
            ExpenseCategoryTotal(category=category.value, total=Decimal(totals.get(category.value) or 0))
            for category in ExpenseCategory
        ]
