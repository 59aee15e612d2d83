from fastapi import APIRouter, HTTPException

from services import vehicle_service
from utils.vcc_format import format_date_dmy

router = APIRouter(prefix="/api/public/vehicle", tags=["public"])
# path encoded in certificate QR codes, see vcc_pdf.public_vehicle_url
page_router = APIRouter(prefix="/public/vehicle", tags=["public"])

PRINTED_STATUS = "Printed/Downloaded"


def public_details(vehicle: dict) -> list:
    """Labelled rows shown on the public VCC page, in display order"""
    def value(key):
        return vehicle.get(key) or ""

    return [
        {"label": "VCC No", "value": value("vccNo")},
        {"label": "Status", "value": PRINTED_STATUS},
        {"label": "VCC Generation Date", "value": format_date_dmy(vehicle.get("vccGenerationDate"), sep="-")},
        {"label": "Chassis No", "value": value("chassisNo")},
        {"label": "Engine Number", "value": value("engineNumber")},
        {"label": "Year of Built", "value": value("yearOfBuilt")},
        {"label": "Vehicle Drive", "value": value("vehicleDrive")},
        {"label": "Country of Origin", "value": value("countryOfOrigin")},
        {"label": "Engine Capacity", "value": value("engineCapacity")},
        {"label": "Carriage Capacity", "value": value("carriageCapacity")},
        {"label": "Vehicle Model", "value": value("vehicleModel")},
        {"label": "Vehicle Brand Name", "value": value("vehicleBrandName")},
        {"label": "Vehicle Type", "value": value("vehicleType")},
        {"label": "Color", "value": value("vehicleColor")},
        {"label": "Specification Standard Name", "value": value("specificationStandardName")},
        {"label": "Declaration Number", "value": value("declarationNumber")},
        {"label": "Declaration Date", "value": format_date_dmy(vehicle.get("declarationDate"), sep="-")},
        {"label": "Owner Code", "value": value("ownerCode")},
        {"label": "Owner Name", "value": value("ownerName")},
        {"label": "Print Remarks", "value": value("printRemarks")},
    ]


@router.get("/{vehicle_id}")
@page_router.get("/{vehicle_id}")
async def get_public_vehicle(vehicle_id: str):
    """Read-only VCC details reached from the certificate QR code - no login"""
    vehicle = await vehicle_service.get_vehicle(vehicle_id)
    if not vehicle:
        raise HTTPException(
            status_code=404,
            detail={
                "title": "Vehicle Not Found",
                "message": "The requested vehicle record could not be found.",
            }
        )
    return {
        "id": vehicle.get("id"),
        "title": "View VCC Details",
        "section": "VCC Vehicle Details",
        "details": public_details(vehicle),
    }
