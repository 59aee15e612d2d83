import pytest

from models.vehicle import VehicleRecord


SAMPLE_VEHICLE = {
    "id": "3f2c9a1e-5b7d-4c1a-9e8f-0a1b2c3d4e5f",
    "vccNo": "VCC-2023-0042",
    "vccGenerationDate": "2023-05-07",
    "chassisNo": "JTMHV05J604123456",
    "engineNumber": "1VD-0223344",
    "yearOfBuilt": "2021",
    "vehicleDrive": "4WD",
    "countryOfOrigin": "JAPAN",
    "engineCapacity": "4500 CC",
    "carriageCapacity": "650 KG",
    "passengerCapacity": "7",
    "vehicleModel": "LAND CRUISER",
    "vehicleBrandName": "TOYOTA",
    "vehicleType": "STATION WAGON",
    "vehicleColor": "WHITE",
    "specificationStandardName": "GCC",
    "declarationNumber": "101-23-004512",
    "declarationDate": "2023-04-30",
    "ownerCode": "OC-7781",
    "ownerName": "AL NOOR MOTORS LLC",
    "printRemarks": "FIRST REGISTRATION",
}


@pytest.fixture
def vehicle_doc():
    return dict(SAMPLE_VEHICLE)


@pytest.fixture
def vehicle():
    return VehicleRecord.model_validate(SAMPLE_VEHICLE)


@pytest.fixture
def bare_vehicle():
    """Required fields only - every optional field left empty"""
    doc = dict(SAMPLE_VEHICLE)
    for key in ("engineNumber", "engineCapacity", "carriageCapacity", "passengerCapacity", "printRemarks"):
        doc[key] = ""
    return VehicleRecord.model_validate(doc)
