from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette import status

from lavajato.auth_utils import get_current_role, require_admin
from lavajato.database import get_db
from lavajato.models.work_order import WorkOrder, WorkOrderCreate, WorkOrderStatusUpdate
from lavajato.services.work_orders import WorkOrderEngine

router = APIRouter(prefix="/work-orders", tags=["work-orders"])


@router.get("", response_model=List[WorkOrder], name="list_work_orders")
def list_work_orders(db: Session = Depends(get_db), _=Depends(get_current_role)):
    return WorkOrderEngine(db).list()


@router.post("", response_model=WorkOrder, status_code=status.HTTP_201_CREATED, name="create_work_order")
def create_work_order(payload: WorkOrderCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    return WorkOrderEngine(db).create(
        customer_id=payload.customer_id,
        vehicle_id=payload.vehicle_id,
        service_ids=payload.service_ids,
        employee=payload.employee,
        damage_log=payload.damage_log,
    )


@router.get("/{work_order_id}", response_model=WorkOrder, name="show_work_order")
def show_work_order(work_order_id: int, db: Session = Depends(get_db), _=Depends(get_current_role)):
    return WorkOrderEngine(db).get(work_order_id)


@router.put("/{work_order_id}", response_model=WorkOrder, name="update_work_order")
def update_work_order(
    work_order_id: int,
    payload: WorkOrderStatusUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    return WorkOrderEngine(db).update_status(
        work_order_id,
        payload.status,
        is_paid=payload.is_paid,
        payment_method=payload.payment_method,
    )


@router.delete("/{work_order_id}", status_code=status.HTTP_204_NO_CONTENT, name="delete_work_order")
def delete_work_order(work_order_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    WorkOrderEngine(db).delete(work_order_id)
