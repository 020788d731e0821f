from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session
from starlette import status

from lavajato.auth_utils import get_current_role, require_admin
from lavajato.database import get_db
from lavajato.models.vehicle import Vehicle, VehicleCreate, VehicleImportResult, VehicleUpdate
from lavajato.services.registry import CustomerRegistry

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("", response_model=List[Vehicle], name="list_vehicles")
def list_vehicles(db: Session = Depends(get_db), _=Depends(get_current_role)):
    return CustomerRegistry(db).list_vehicles()


@router.post("", response_model=Vehicle, status_code=status.HTTP_201_CREATED, name="create_vehicle")
def create_vehicle(payload: VehicleCreate, db: Session = Depends(get_db), _=Depends(require_admin)):
    return CustomerRegistry(db).create_vehicle(
        payload.customer_id, payload.model_dump(exclude={"customer_id"})
    )


@router.post("/import", response_model=VehicleImportResult, name="import_vehicles")
async def import_vehicles(
    excel_file: UploadFile = File(...),
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    if not excel_file.filename or not excel_file.filename.endswith(".xlsx"):
        raise HTTPException(status_code=400, detail="Arquivo inválido: envie uma planilha .xlsx.")

    content = await excel_file.read()
    await excel_file.close()
    imported, skipped = CustomerRegistry(db).import_vehicles(content)
    return VehicleImportResult(imported=imported, skipped=skipped)


@router.get("/{vehicle_id}", response_model=Vehicle, name="show_vehicle")
def show_vehicle(vehicle_id: int, db: Session = Depends(get_db), _=Depends(get_current_role)):
    return CustomerRegistry(db).find_vehicle(vehicle_id)


@router.put("/{vehicle_id}", response_model=Vehicle, name="update_vehicle")
def update_vehicle(
    vehicle_id: int,
    payload: VehicleUpdate,
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    return CustomerRegistry(db).update_vehicle(vehicle_id, payload.model_dump())


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT, name="delete_vehicle")
def delete_vehicle(vehicle_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    CustomerRegistry(db).delete_vehicle(vehicle_id)
