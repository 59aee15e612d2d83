from fastapi import APIRouter, HTTPException, Depends, Request, BackgroundTasks
from fastapi.responses import StreamingResponse
import logging
import os
import io

from models.vehicle import VehicleCreate, VehicleUpdate
from services import vehicle_service
from services.preview_service import listing_preview
from utils import vcc_pdf
from utils.auth import get_current_user, require_roles
from utils.error_codes import ErrorCode, create_error_response

router = APIRouter(prefix="/api/vehicles", tags=["vehicles"])
logger = logging.getLogger(__name__)


def resolve_origin(request: Request) -> str:
    """Origin encoded in certificate QR codes - configured, else the caller's"""
    configured = os.environ.get("PUBLIC_APP_ORIGIN")
    if configured:
        return configured.rstrip("/")
    origin = request.headers.get("origin")
    if origin:
        return origin.rstrip("/")
    return str(request.base_url).rstrip("/")


async def refresh_listing_preview(origin: str):
    vehicles = await vehicle_service.list_vehicle_records()
    await listing_preview.refresh(vehicles, origin)


def not_found():
    return HTTPException(status_code=404, detail=create_error_response(ErrorCode.VEHICLE_NOT_FOUND))


@router.get("")
async def list_vehicles(user=Depends(get_current_user)):
    return await vehicle_service.list_vehicles()


@router.get("/preview/latest")
async def get_latest_preview(user=Depends(get_current_user)):
    """PDF preview of the first listed vehicle, regenerated whenever the list changes"""
    content = listing_preview.current()
    if content is None:
        raise HTTPException(status_code=404, detail=create_error_response(ErrorCode.CERTIFICATE_PREVIEW_UNAVAILABLE))
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": "inline; filename=preview.pdf"}
    )


@router.get("/{vehicle_id}")
async def get_vehicle(vehicle_id: str, user=Depends(get_current_user)):
    vehicle = await vehicle_service.get_vehicle(vehicle_id)
    if not vehicle:
        raise not_found()
    return vehicle


@router.post("")
async def create_vehicle(
    req: VehicleCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    user=Depends(get_current_user)
):
    success, error, vehicle = await vehicle_service.create_vehicle(req, created_by=user.get("user_id"))
    if not success:
        raise HTTPException(status_code=409, detail=create_error_response(ErrorCode.VEHICLE_DUPLICATE_VCC, details=error))

    logger.info(f"Vehicle {vehicle['vccNo']} created by {user.get('username')}")
    background_tasks.add_task(refresh_listing_preview, resolve_origin(request))
    return vehicle


@router.put("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: str,
    req: VehicleUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    user=Depends(get_current_user)
):
    success, error, vehicle = await vehicle_service.update_vehicle(vehicle_id, req)
    if not success:
        if error == "Vehicle not found":
            raise not_found()
        raise HTTPException(status_code=409, detail=create_error_response(ErrorCode.VEHICLE_DUPLICATE_VCC, details=error))

    background_tasks.add_task(refresh_listing_preview, resolve_origin(request))
    return vehicle


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    user=Depends(require_roles("admin"))
):
    deleted = await vehicle_service.delete_vehicle(vehicle_id)
    if not deleted:
        raise not_found()

    logger.info(f"Vehicle {vehicle_id} deleted by {user.get('username')}")
    background_tasks.add_task(refresh_listing_preview, resolve_origin(request))
    return {"message": "Vehicle deleted"}


@router.post("/{vehicle_id}/duplicate")
async def duplicate_vehicle(
    vehicle_id: str,
    req: VehicleUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    user=Depends(get_current_user)
):
    """New record pre-filled from an existing one - the body holds the edited fields"""
    success, error, vehicle = await vehicle_service.duplicate_vehicle(vehicle_id, req, created_by=user.get("user_id"))
    if not success:
        if error == "Vehicle not found":
            raise not_found()
        raise HTTPException(status_code=409, detail=create_error_response(ErrorCode.VEHICLE_DUPLICATE_VCC, details=error))

    logger.info(f"Vehicle {vehicle['vccNo']} duplicated from {vehicle_id} by {user.get('username')}")
    background_tasks.add_task(refresh_listing_preview, resolve_origin(request))
    return vehicle


@router.get("/{vehicle_id}/public-url")
async def get_public_url(vehicle_id: str, request: Request, user=Depends(get_current_user)):
    """The link printed in the certificate QR code"""
    vehicle = await vehicle_service.get_vehicle(vehicle_id)
    if not vehicle:
        raise not_found()
    return {
        "id": vehicle_id,
        "vccNo": vehicle.get("vccNo"),
        "publicUrl": vcc_pdf.public_vehicle_url(resolve_origin(request), vehicle_id),
    }


@router.get("/{vehicle_id}/certificate")
async def download_certificate(vehicle_id: str, request: Request, user=Depends(get_current_user)):
    """Printable VCC certificate as a file download"""
    vehicle = await vehicle_service.get_vehicle_record(vehicle_id)
    if not vehicle:
        raise not_found()

    try:
        certificate = await vcc_pdf.render(vehicle, "file", resolve_origin(request))
    except Exception as e:
        logger.error(f"Certificate generation failed for {vehicle.vcc_no}: {e}")
        raise HTTPException(
            status_code=500,
            detail=create_error_response(ErrorCode.CERTIFICATE_GENERATION_FAILED, details=str(e))
        )

    return StreamingResponse(
        io.BytesIO(certificate.content),
        media_type=certificate.media_type,
        headers={"Content-Disposition": f'attachment; filename="{certificate.filename}"'}
    )


@router.get("/{vehicle_id}/certificate/preview")
async def preview_certificate(vehicle_id: str, request: Request, user=Depends(get_current_user)):
    """Inline preview - 503 when the certificate cannot be rendered"""
    vehicle = await vehicle_service.get_vehicle_record(vehicle_id)
    if not vehicle:
        raise not_found()

    content = await vcc_pdf.render(vehicle, "blob", resolve_origin(request))
    if content is None:
        raise HTTPException(status_code=503, detail=create_error_response(ErrorCode.CERTIFICATE_PREVIEW_UNAVAILABLE))

    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{vcc_pdf.certificate_filename(vehicle)}"'}
    )
