# app/api/v1/reference_router.py
from fastapi import APIRouter, Depends, Query
from app.core import get_thai_divisions
from app.reference import ThaiDivisions
from app.db.schemas import (
    ProvinceListResponse,
    DistrictListResponse,
    SubdistrictListResponse,
)
from common.api_error import NotFoundError

reference_router = APIRouter(
    prefix="/reference",
    tags=["Reference"],
)


@reference_router.get("/provinces", response_model=ProvinceListResponse)
async def list_provinces(divisions: ThaiDivisions = Depends(get_thai_divisions)):
    return ProvinceListResponse(provinces=divisions.provinces())


@reference_router.get(
    "/districts",
    response_model=DistrictListResponse,
    responses={404: {"description": "Province not found"}},
)
async def list_districts(
    province: str = Query(..., min_length=1),
    divisions: ThaiDivisions = Depends(get_thai_divisions),
):
    districts = divisions.districts_of(province)
    if not districts:
        raise NotFoundError("Province not found")
    return DistrictListResponse(province=province, districts=sorted(districts))


@reference_router.get(
    "/subdistricts",
    response_model=SubdistrictListResponse,
    responses={404: {"description": "District not found"}},
)
async def list_subdistricts(
    district: str = Query(..., min_length=1),
    divisions: ThaiDivisions = Depends(get_thai_divisions),
):
    subdistricts = divisions.subdistricts_of(district)
    if not subdistricts:
        raise NotFoundError("District not found")
    return SubdistrictListResponse(district=district, subdistricts=subdistricts)


__all__ = ["reference_router"]
