from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette import status

from lavajato.auth_utils import get_current_role, require_admin
from lavajato.database import get_db
from lavajato.models.catalog import Service, ServiceCreate, ServiceUpdate
from lavajato.services.catalog import CatalogStore

router = APIRouter(prefix="/services", tags=["services"])


# Rota 1: Catálogo de serviços (com os insumos de cada um)
@router.get("", response_model=List[Service], name="list_services")
def list_services(db: Session = Depends(get_db), _=Depends(get_current_role)):
    return CatalogStore(db).list_services()


# Rota 2: Novo serviço
@router.post("", response_model=Service, status_code=status.HTTP_201_CREATED, name="create_service")
def create_service(payload: ServiceCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    return CatalogStore(db).create_service(
        payload.name, payload.price, payload.products_consumed
    )


# Rota 3: Atualizar serviço (não altera o total de OS já abertas)
@router.put("/{service_id}", response_model=Service, name="update_service")
def update_service(
    service_id: int,
    payload: ServiceUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    return CatalogStore(db).update_service(
        service_id,
        name=payload.name,
        price=payload.price,
        products_consumed=payload.products_consumed,
    )


# Rota 4: Deletar serviço
@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT, name="delete_service")
def delete_service(service_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    CatalogStore(db).delete_service(service_id)
