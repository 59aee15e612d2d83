"""
Vehicle Service - إدارة سجلات شهادات المطابقة
CRUD over the vehicles collection. Documents are stored with camelCase keys.
"""
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from database import db
from models.vehicle import VehicleCreate, VehicleUpdate, VehicleRecord


async def list_vehicles(limit: int = 500) -> List[dict]:
    """All vehicles, newest first"""
    return await db.vehicles.find({}, {"_id": 0}).sort("createdAt", -1).to_list(limit)


async def get_vehicle(vehicle_id: str) -> Optional[dict]:
    return await db.vehicles.find_one({"id": vehicle_id}, {"_id": 0})


async def list_vehicle_records(limit: int = 500) -> List[VehicleRecord]:
    return [VehicleRecord.model_validate(v) for v in await list_vehicles(limit)]


async def get_vehicle_record(vehicle_id: str) -> Optional[VehicleRecord]:
    vehicle = await get_vehicle(vehicle_id)
    return VehicleRecord.model_validate(vehicle) if vehicle else None


async def validate_unique_vcc_no(vcc_no: str, exclude_id: str = None) -> Tuple[bool, Optional[str]]:
    """
    VCC numbers identify the printed card and must not repeat.
    Returns (is_valid, error_message)
    """
    query = {"vccNo": vcc_no}
    if exclude_id:
        query["id"] = {"$ne": exclude_id}

    existing = await db.vehicles.find_one(query, {"_id": 0, "id": 1})
    if existing:
        return False, f"VCC No {vcc_no} already exists"
    return True, None


async def create_vehicle(data: VehicleCreate, created_by: str = None) -> Tuple[bool, Optional[str], Optional[dict]]:
    """
    Create a vehicle record.
    Returns (success, error_message, vehicle)
    """
    valid, error = await validate_unique_vcc_no(data.vcc_no)
    if not valid:
        return False, error, None

    now = datetime.now(timezone.utc).isoformat()
    vehicle = {
        "id": str(uuid.uuid4()),
        **data.model_dump(by_alias=True),
        "createdBy": created_by,
        "createdAt": now,
        "updatedAt": now,
    }
    await db.vehicles.insert_one(vehicle)
    vehicle.pop('_id', None)
    return True, None, vehicle


async def update_vehicle(vehicle_id: str, data: VehicleUpdate) -> Tuple[bool, Optional[str], Optional[dict]]:
    """
    Apply a partial update.
    Returns (success, error_message, updated_vehicle)
    """
    vehicle = await get_vehicle(vehicle_id)
    if not vehicle:
        return False, "Vehicle not found", None

    changes = data.changes()
    if "vccNo" in changes and changes["vccNo"] != vehicle.get("vccNo"):
        valid, error = await validate_unique_vcc_no(changes["vccNo"], exclude_id=vehicle_id)
        if not valid:
            return False, error, None

    changes["updatedAt"] = datetime.now(timezone.utc).isoformat()
    await db.vehicles.update_one({"id": vehicle_id}, {"$set": changes})

    updated = await get_vehicle(vehicle_id)
    return True, None, updated


async def delete_vehicle(vehicle_id: str) -> bool:
    result = await db.vehicles.delete_one({"id": vehicle_id})
    return result.deleted_count > 0


# fields a duplicate never inherits from its source
NOT_COPIED = ("id", "createdBy", "createdAt", "updatedAt")


async def duplicate_vehicle(
    vehicle_id: str,
    overrides: VehicleUpdate,
    created_by: str = None,
) -> Tuple[bool, Optional[str], Optional[dict]]:
    """
    Create a new record from an existing one, with the supplied fields changed.
    The copy gets its own id and must carry a VCC No of its own.
    Returns (success, error_message, vehicle)
    """
    source = await get_vehicle(vehicle_id)
    if not source:
        return False, "Vehicle not found", None

    fields = {k: v for k, v in source.items() if k not in NOT_COPIED}
    fields.update(overrides.changes())
    return await create_vehicle(VehicleCreate.model_validate(fields), created_by=created_by)
