# app/db/schemas/reference_schemas.py
from pydantic import BaseModel


class ProvinceListResponse(BaseModel):
    provinces: list[str]


class DistrictListResponse(BaseModel):
    province: str
    districts: list[str]


class SubdistrictListResponse(BaseModel):
    district: str
    subdistricts: list[str]
