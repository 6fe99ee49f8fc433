from typing import List, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from app.core.exceptions import ConfigurationError, WorkbookDecodeError
from app.services.analytics_service import AnalyticsService
from app.services.database_service import DatabaseService
from app.services.import_service import PricelistImportService
from app.api.deps import get_analytics_service, get_database_service, get_import_service
from app.models.pricelist import ImportResponse, PriceRow, PricelistOverview, ProductWithPrices
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def _respond(status_code: int, body: ImportResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True))


@router.post("/import",
             response_model=ImportResponse,
             summary="Import Price List",
             description="Upload a supplier price list workbook (.xlsx) and upsert its products and prices.",
             response_description="Import counters and per-row errors.")
async def import_pricelist(
    file: Optional[UploadFile] = File(None),
    import_service: PricelistImportService = Depends(get_import_service),
):
    """
    Import a supplier price list.

    Row, product and price failures do not abort the run: they are listed in
    `stats.errors` and the response is still a 200. Only a missing file, an
    unreadable workbook or missing configuration fail the whole request.
    """
    if file is None:
        logger.error("No file in request")
        return _respond(400, ImportResponse(success=False, error="No file provided"))

    content = await file.read()
    try:
        outcome = await run_in_threadpool(import_service.run_import, content, file.filename)
    except ConfigurationError as e:
        logger.error(f"Price list import misconfigured: {str(e)}")
        return _respond(500, ImportResponse(success=False, error=str(e)))
    except WorkbookDecodeError as e:
        logger.error(f"Unreadable workbook {file.filename}: {str(e)}")
        return _respond(400, ImportResponse(
            success=False,
            error=str(e),
            details="Upload the price list as an .xlsx workbook",
        ))
    except Exception as e:
        logger.exception(f"Price list import failed: {str(e)}")
        return _respond(500, ImportResponse(
            success=False,
            error=str(e) or "Unknown error",
            details="Check service logs for more information",
        ))

    return _respond(200, ImportResponse(
        success=True,
        stats=outcome.stats,
        status=outcome.status,
        duration=outcome.duration,
        filename=outcome.filename,
        file_size=outcome.file_size,
    ))


@router.get("/products", response_model=List[ProductWithPrices])
async def list_products(
    search: Optional[str] = Query(None, description="Case-insensitive match on name, code or article"),
    limit: Optional[int] = Query(None, ge=1),
    db_service: DatabaseService = Depends(get_database_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    try:
        rows = db_service.fetch_product_price_rows(search=search, limit=limit)
        return analytics.group_products(rows)
    except Exception as e:
        logger.error(f"Failed to fetch products: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch products: {str(e)}")


@router.get("/prices", response_model=List[PriceRow])
async def list_prices(
    product_id: Optional[int] = Query(None),
    db_service: DatabaseService = Depends(get_database_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    try:
        return analytics.to_price_rows(db_service.fetch_prices(product_id))
    except Exception as e:
        logger.error(f"Failed to fetch prices: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch prices: {str(e)}")


@router.get("/overview", response_model=PricelistOverview)
async def get_overview(
    db_service: DatabaseService = Depends(get_database_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    try:
        return analytics.build_overview(db_service.fetch_product_totals(), db_service.fetch_price_totals())
    except Exception as e:
        logger.error(f"Failed to build overview: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to build overview: {str(e)}")


@router.get("/suppliers", response_model=List[str])
async def list_suppliers(
    db_service: DatabaseService = Depends(get_database_service),
):
    try:
        return db_service.fetch_suppliers()
    except Exception as e:
        logger.error(f"Failed to fetch suppliers: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch suppliers: {str(e)}")
