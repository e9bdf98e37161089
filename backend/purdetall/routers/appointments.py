from fastapi import APIRouter, Depends, status

from purdetall.auth import require_admin
from purdetall.dependencies import get_appointment_store
from purdetall.http_errors import raise_store_http_error
from purdetall.models import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    AvailableTimesResponse,
)
from purdetall.services.appointment_store import AppointmentStore
from purdetall.services.errors import StoreError

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


@router.get("", response_model=list[Appointment], dependencies=[Depends(require_admin)])
def list_appointments(store: AppointmentStore = Depends(get_appointment_store)):
    try:
        return store.list_appointments()
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/status/{appointment_status}", response_model=list[Appointment], dependencies=[Depends(require_admin)])
def list_appointments_by_status(
    appointment_status: AppointmentStatus,
    store: AppointmentStore = Depends(get_appointment_store),
):
    try:
        return store.list_appointments(status=appointment_status)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/available-times/{slot_date}", response_model=AvailableTimesResponse)
def available_times(slot_date: str, store: AppointmentStore = Depends(get_appointment_store)):
    try:
        return AvailableTimesResponse(availableTimes=store.available_times(slot_date))
    except StoreError as exc:
        raise_store_http_error(exc)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_appointment(payload: AppointmentCreate, store: AppointmentStore = Depends(get_appointment_store)):
    try:
        appointment_id = store.create_appointment(payload)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {
        "success": True,
        "message": "Cita solicitada correctamente. Te contactaremos pronto para confirmar.",
        "appointmentId": appointment_id,
    }


@router.get("/{appointment_id}", response_model=Appointment, dependencies=[Depends(require_admin)])
def get_appointment(appointment_id: int, store: AppointmentStore = Depends(get_appointment_store)):
    try:
        return store.get_appointment(appointment_id)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.put("/{appointment_id}/status", dependencies=[Depends(require_admin)])
def update_appointment_status(
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    store: AppointmentStore = Depends(get_appointment_store),
):
    try:
        store.update_status(appointment_id, payload.status, payload.notes)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Estado de cita actualizado correctamente"}


@router.put("/{appointment_id}", dependencies=[Depends(require_admin)])
def update_appointment(
    appointment_id: int,
    payload: AppointmentUpdate,
    store: AppointmentStore = Depends(get_appointment_store),
):
    try:
        store.update_appointment(appointment_id, payload)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Cita actualizada correctamente"}


@router.delete("/{appointment_id}", dependencies=[Depends(require_admin)])
def delete_appointment(appointment_id: int, store: AppointmentStore = Depends(get_appointment_store)):
    try:
        store.delete_appointment(appointment_id)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Cita eliminada correctamente"}
