from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette import status

from lavajato.auth_utils import get_current_role, require_admin
from lavajato.database import get_db
from lavajato.models.customer import Customer, CustomerCreate, CustomerUpdate
from lavajato.models.loyalty import LoyaltyStatus
from lavajato.services.loyalty import LoyaltyEvaluator
from lavajato.services.registry import CustomerRegistry

router = APIRouter(prefix="/customers", tags=["customers"])


# Rota 1: Listar Clientes (com veículos e histórico de serviços)
@router.get("", response_model=List[Customer], name="list_customers")
def list_customers(db: Session = Depends(get_db), _=Depends(get_current_role)):
    return CustomerRegistry(db).list_customers()


# Rota 2: Cadastrar Cliente (e seus veículos, na mesma transação)
@router.post("", response_model=Customer, status_code=status.HTTP_201_CREATED, name="create_customer")
def create_customer(
    payload: CustomerCreate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    vehicles = [vehicle.model_dump() for vehicle in payload.vehicles]
    return CustomerRegistry(db).register_customer(
        payload.model_dump(exclude={"vehicles"}), vehicles
    )


# Rota 3: Detalhes de um Cliente
@router.get("/{customer_id}", response_model=Customer, name="show_customer")
def show_customer(customer_id: int, db: Session = Depends(get_db), _=Depends(get_current_role)):
    return CustomerRegistry(db).find_customer(customer_id)


# Rota 4: Atualizar Cliente
@router.put("/{customer_id}", response_model=Customer, name="update_customer")
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    return CustomerRegistry(db).update_customer(customer_id, payload.model_dump())


# Rota 5: Deletar Cliente (veículos e ordens de serviço vão junto)
@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT, name="delete_customer")
def delete_customer(customer_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    CustomerRegistry(db).delete_customer(customer_id)


# Rota 6: Situação no programa de fidelidade
@router.get("/{customer_id}/loyalty", response_model=LoyaltyStatus, name="customer_loyalty")
def customer_loyalty(customer_id: int, db: Session = Depends(get_db), _=Depends(get_current_role)):
    customer = CustomerRegistry(db).find_customer(customer_id)
    return LoyaltyEvaluator(db).evaluate(customer)
