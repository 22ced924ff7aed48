"""
Reports routers: the reports screen and the home dashboard.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from starlette.concurrency import run_in_threadpool

from gev_api.common import cache
from gev_api.common.dependencies import get_product_repository, get_sale_repository
from gev_api.common.exceptions import AppError
from gev_api.common.responses import app_error_response, success_response, unexpected_error_response
from gev_api.common.schemas import ApiResponse
from gev_api.products.repository import ProductRepository
from gev_api.reports.schemas import DashboardData, ReportData
from gev_api.reports.services import DEFAULT_TOP_LIMIT, build_dashboard, build_report
from gev_api.sales.repository import SaleRepository

router = APIRouter()
dashboard_router = APIRouter()


@router.get("/dashboard", response_model=ApiResponse[ReportData])
async def get_report(
        periodo: str = Query("mes", description="hoje, semana, mes or total"),
        limite: int = Query(DEFAULT_TOP_LIMIT, ge=1, le=100, description="Size of the product ranking"),
        repo: SaleRepository = Depends(get_sale_repository)
):
    """
    Daily sales series, best selling products and financial summary for a period.

    Args:
        periodo: Window to aggregate
        limite: Number of products in the ranking
        repo: Sales repository (injected)

    Returns:
        Envelope with vendas_diarias, top_produtos and resumo_financeiro
    """
    try:
        cache_key = cache.generate_cache_key(cache.REPORTS_PREFIX, {"periodo": periodo, "limite": limite})
        cached = await cache.get_cache(cache_key)
        if cached is not None:
            return success_response(cached)

        report = jsonable_encoder(await run_in_threadpool(build_report, repo, periodo, limite))
        await cache.set_cache(cache_key, report, ttl=cache.REPORTS_CACHE_TTL)
        return success_response(report)
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@dashboard_router.get("/dashboard", response_model=ApiResponse[DashboardData])
async def get_dashboard(
        sales: SaleRepository = Depends(get_sale_repository),
        catalog: ProductRepository = Depends(get_product_repository)
):
    """
    Month-to-date revenue and profit, product count, pending sales and the
    daily history of the current month.
    """
    try:
        cache_key = cache.generate_cache_key(cache.REPORTS_PREFIX, {"view": "dashboard"})
        cached = await cache.get_cache(cache_key)
        if cached is not None:
            return success_response(cached)

        total_produtos = await run_in_threadpool(catalog.count)
        dashboard = jsonable_encoder(await run_in_threadpool(build_dashboard, sales, total_produtos))
        await cache.set_cache(cache_key, dashboard, ttl=cache.REPORTS_CACHE_TTL)
        return success_response(dashboard)
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)
