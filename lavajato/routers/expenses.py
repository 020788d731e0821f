import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette import status

from lavajato.auth_utils import require_admin
from lavajato.database import get_db, transaction
from lavajato.database_models import Expense as ExpenseRow
from lavajato.exceptions import NotFoundError
from lavajato.models.expense import Expense, ExpenseCreate

logger = logging.getLogger(__name__)

# Financeiro: todas as rotas são restritas ao administrador
router = APIRouter(prefix="/expenses", tags=["finance"], dependencies=[Depends(require_admin)])


def _get_expense(db: Session, expense_id: int) -> ExpenseRow:
    expense = db.query(ExpenseRow).filter(ExpenseRow.id == expense_id).first()
    if not expense:
        raise NotFoundError("Despesa", expense_id)
    return expense


@router.get("", response_model=List[Expense], name="list_expenses")
def list_expenses(db: Session = Depends(get_db)):
    return db.query(ExpenseRow).order_by(ExpenseRow.date.desc(), ExpenseRow.id.desc()).all()


@router.post("", response_model=Expense, status_code=status.HTTP_201_CREATED, name="create_expense")
def create_expense(payload: ExpenseCreate, db: Session = Depends(get_db)):
    new_expense = ExpenseRow(
        description=payload.description,
        category=payload.category.value,
        amount=payload.amount,
        date=payload.date,
    )
    with transaction(db):
        db.add(new_expense)
    db.refresh(new_expense)
    logger.info("Despesa lançada: %s (R$ %s)", new_expense.description, new_expense.amount)
    return new_expense


@router.put("/{expense_id}", response_model=Expense, name="update_expense")
def update_expense(expense_id: int, payload: ExpenseCreate, db: Session = Depends(get_db)):
    with transaction(db):
        expense = _get_expense(db, expense_id)
        expense.description = payload.description
        expense.category = payload.category.value
        expense.amount = payload.amount
        expense.date = payload.date
    db.refresh(expense)
    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT, name="delete_expense")
def delete_expense(expense_id: int, db: Session = Depends(get_db)):
    with transaction(db):
        db.delete(_get_expense(db, expense_id))
