"""
TerpTaster Backend - Terpene Reference Routes
=============================================

What:  Read-only access to the terpene dataset, the expected-flavors helper
       of the quick score screen, and the popular-terpenes report.

`/popular` is declared before `/{name}` so it is not taken for a terpene name.
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from terptaster.database import get_db_session
from terptaster.exceptions import NotFoundError
from terptaster.schemas.common import ErrorResponse
from terptaster.schemas.review import PopularTerpene
from terptaster.schemas.terpene import (
    ExpectedFlavorsRequest,
    ExpectedFlavorsResponse,
    FlavorListResponse,
    NameListResponse,
    Terpene,
    TerpeneListResponse,
)
from terptaster.services.review_service import review_service
from terptaster.services.terpene_dataset import TerpeneDataset, get_terpene_dataset

router = APIRouter(prefix="/api/terpenes", tags=["Terpenes"])

REFERENCE_CACHE = "public, max-age=3600"


@router.get("", response_model=TerpeneListResponse, summary="All terpenes")
async def list_terpenes(
    response: Response,
    dataset: TerpeneDataset = Depends(get_terpene_dataset),
) -> TerpeneListResponse:
    response.headers["Cache-Control"] = REFERENCE_CACHE
    return TerpeneListResponse(terpenes=list(dataset.terpenes), count=len(dataset))


@router.get("/names", response_model=NameListResponse, summary="Terpene names (sorted)")
async def list_names(dataset: TerpeneDataset = Depends(get_terpene_dataset)) -> NameListResponse:
    return NameListResponse(names=dataset.names())


@router.get("/flavors", response_model=FlavorListResponse, summary="Every known flavor (sorted)")
async def list_flavors(dataset: TerpeneDataset = Depends(get_terpene_dataset)) -> FlavorListResponse:
    return FlavorListResponse(flavors=dataset.flavors())


@router.get(
    "/popular",
    response_model=List[PopularTerpene],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Most reviewed terpenes",
    description="Top 20 terpene names across reviews, with frequency and average overall score.",
)
async def popular_terpenes(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> List[PopularTerpene]:
    result = await review_service.popular_terpenes(db)
    response.headers["Cache-Control"] = REFERENCE_CACHE
    return result


@router.post(
    "/expected-flavors",
    response_model=ExpectedFlavorsResponse,
    summary="Flavors to expect from a terpene selection",
)
async def expected_flavors(
    body: ExpectedFlavorsRequest,
    dataset: TerpeneDataset = Depends(get_terpene_dataset),
) -> ExpectedFlavorsResponse:
    return ExpectedFlavorsResponse(
        selected_terpenes=body.selected_terpenes,
        flavors=dataset.expected_flavors(body.selected_terpenes),
    )


@router.get(
    "/{name}",
    response_model=Terpene,
    responses={404: {"description": "Unknown terpene", "model": ErrorResponse}},
    summary="One terpene by exact name",
)
async def get_terpene(
    name: str,
    dataset: TerpeneDataset = Depends(get_terpene_dataset),
) -> Terpene:
    terpene = dataset.get(name)
    if terpene is None:
        raise NotFoundError(resource="terpene", resource_id=name)
    return terpene
