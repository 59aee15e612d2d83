"""
Vehicle Model - نموذج شهادة المطابقة للمركبة (VCC)
Wire names are camelCase, attributes are snake_case
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from utils.vcc_format import normalize_date


# الحقول الإجبارية مع أسمائها في النموذج
REQUIRED_FIELD_LABELS = {
    "vcc_no": "VCC No",
    "vcc_generation_date": "VCC Generation Date",
    "chassis_no": "Chassis No",
    "year_of_built": "Year of Built",
    "vehicle_drive": "Vehicle Drive",
    "country_of_origin": "Country of Origin",
    "vehicle_model": "Vehicle Model",
    "vehicle_brand_name": "Vehicle Brand Name",
    "vehicle_type": "Vehicle Type",
    "vehicle_color": "Vehicle Color",
    "specification_standard_name": "Specification Standard Name",
    "declaration_number": "Declaration Number",
    "declaration_date": "Declaration Date",
    "owner_code": "Owner Code",
    "owner_name": "Owner Name",
}

OPTIONAL_FIELDS = (
    "engine_number",
    "engine_capacity",
    "carriage_capacity",
    "passenger_capacity",
    "print_remarks",
)

DATE_FIELDS = ("vcc_generation_date", "declaration_date")


class VehicleBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class VehicleRecord(VehicleBase):
    """A stored VCC record as read back from the database"""
    id: Optional[str] = None
    vcc_no: str = ""
    vcc_generation_date: str = ""
    chassis_no: str = ""
    engine_number: Optional[str] = ""
    year_of_built: str = ""
    vehicle_drive: str = ""
    country_of_origin: str = ""
    engine_capacity: Optional[str] = ""
    carriage_capacity: Optional[str] = ""
    passenger_capacity: Optional[str] = ""
    vehicle_model: str = ""
    vehicle_brand_name: str = ""
    vehicle_type: str = ""
    vehicle_color: str = ""
    specification_standard_name: str = ""
    declaration_number: str = ""
    declaration_date: str = ""
    owner_code: str = ""
    owner_name: str = ""
    print_remarks: Optional[str] = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class VehicleCreate(VehicleBase):
    vcc_no: str
    vcc_generation_date: str
    chassis_no: str
    engine_number: Optional[str] = ""
    year_of_built: str
    vehicle_drive: str
    country_of_origin: str
    engine_capacity: Optional[str] = ""
    carriage_capacity: Optional[str] = ""
    passenger_capacity: Optional[str] = ""
    vehicle_model: str
    vehicle_brand_name: str
    vehicle_type: str
    vehicle_color: str
    specification_standard_name: str
    declaration_number: str
    declaration_date: str
    owner_code: str
    owner_name: str
    print_remarks: Optional[str] = ""

    @field_validator(*REQUIRED_FIELD_LABELS)
    @classmethod
    def check_required(cls, value: str, info: ValidationInfo) -> str:
        return _clean_required(value, info.field_name)

    @field_validator(*OPTIONAL_FIELDS)
    @classmethod
    def blank_optional(cls, value: Optional[str]) -> str:
        return (value or "").strip()


class VehicleUpdate(VehicleBase):
    """Partial update - omitted fields stay untouched"""
    vcc_no: Optional[str] = None
    vcc_generation_date: Optional[str] = None
    chassis_no: Optional[str] = None
    engine_number: Optional[str] = None
    year_of_built: Optional[str] = None
    vehicle_drive: Optional[str] = None
    country_of_origin: Optional[str] = None
    engine_capacity: Optional[str] = None
    carriage_capacity: Optional[str] = None
    passenger_capacity: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_brand_name: Optional[str] = None
    vehicle_type: Optional[str] = None
    vehicle_color: Optional[str] = None
    specification_standard_name: Optional[str] = None
    declaration_number: Optional[str] = None
    declaration_date: Optional[str] = None
    owner_code: Optional[str] = None
    owner_name: Optional[str] = None
    print_remarks: Optional[str] = None

    @field_validator(*REQUIRED_FIELD_LABELS)
    @classmethod
    def check_required(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if value is None:
            return None
        return _clean_required(value, info.field_name)

    def changes(self) -> dict:
        """Supplied fields only, keyed by their stored (camelCase) names"""
        return {k: v for k, v in self.model_dump(by_alias=True).items() if v is not None}


def _clean_required(value: str, field_name: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{REQUIRED_FIELD_LABELS[field_name]} is required")
    if field_name in DATE_FIELDS:
        return normalize_date(value)
    return value
