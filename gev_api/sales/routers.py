"""
This module contains the FastAPI routers for sales endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from starlette import status
from starlette.concurrency import run_in_threadpool

from gev_api.common import cache
from gev_api.common.dependencies import (
    get_customer_repository, get_product_repository, get_sale_repository,
)
from gev_api.common.exceptions import AppError
from gev_api.common.responses import app_error_response, success_response, unexpected_error_response
from gev_api.common.schemas import ApiResponse
from gev_api.customers.repository import CustomerRepository
from gev_api.products.repository import ProductRepository
from gev_api.sales.repository import SaleRepository
from gev_api.sales.schemas import SaleCreate, SaleCreated, SaleDetailOut, SaleOut
from gev_api.sales.services import create_sale, get_sale, list_sales

router = APIRouter()


@router.post("", response_model=ApiResponse[SaleCreated], status_code=status.HTTP_201_CREATED)
async def create_sale_endpoint(
        sale_data: SaleCreate,
        catalog: ProductRepository = Depends(get_product_repository),
        customers: CustomerRepository = Depends(get_customer_repository),
        sales: SaleRepository = Depends(get_sale_repository)
):
    """
    Register a sale.

    Prices come from the catalog. The stock of every product is decremented
    in the same transaction that stores the sale.

    Args:
        sale_data: Items (product id and quantity) plus payment details
        catalog: Product repository (injected)
        customers: Customer repository (injected)
        sales: Sale repository (injected)

    Returns:
        Envelope with the sale id, total, profit and number of lines
    """
    try:
        # The three repositories share the request session, hence one transaction.
        # Waiting on the SQLite write lock must not block the event loop.
        result = await run_in_threadpool(create_sale, catalog, customers, sales, sale_data)
        await cache.invalidate_products()
        await cache.invalidate_reports()
        return success_response(result, message="Venda registrada com sucesso!",
                                status_code=status.HTTP_201_CREATED)
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.get("", response_model=ApiResponse[list[SaleOut]])
def list_sales_endpoint(
        periodo: Optional[str] = Query(None, description="hoje, semana or mes"),
        cliente_id: Optional[int] = Query(None, description="Only sales of this customer"),
        repo: SaleRepository = Depends(get_sale_repository)
):
    """
    List sales, newest first.
    """
    try:
        sales = list_sales(repo, periodo, cliente_id)
        return success_response(sales, total=len(sales))
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.get("/{sale_id}", response_model=ApiResponse[SaleDetailOut])
def get_sale_endpoint(
        sale_id: int = Path(..., description="The ID of the sale"),
        repo: SaleRepository = Depends(get_sale_repository)
):
    try:
        return success_response(get_sale(repo, sale_id))
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)
