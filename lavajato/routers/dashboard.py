from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from lavajato.auth_utils import get_current_role, require_admin
from lavajato.database import get_db
from lavajato.models.dashboard import DashboardStats, ExpenseCategoryTotal, FinancialChartPoint
from lavajato.services.reporting import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats, name="dashboard_stats")
def dashboard_stats(db: Session = Depends(get_db), _=Depends(get_current_role)):
    return DashboardService(db).stats()


@router.get("/financial-chart", response_model=List[FinancialChartPoint], name="financial_chart")
def financial_chart(
    months: int = Query(6, ge=1, le=24),
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    return DashboardService(db).financial_chart(months=months)


@router.get("/expense-breakdown", response_model=List[ExpenseCategoryTotal], name="expense_breakdown")
def expense_breakdown(db: Session = Depends(get_db), _=Depends(require_admin)):
    return DashboardService(db).expense_breakdown()
