"""
Backup and status routers.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gev_api.common.database import get_session
from gev_api.common.dependencies import (
    get_customer_repository, get_product_repository, get_sale_repository,
)
from gev_api.common.exceptions import AppError
from gev_api.common.responses import app_error_response, success_response, unexpected_error_response
from gev_api.common.schemas import ApiResponse
from gev_api.customers.repository import CustomerRepository
from gev_api.products.repository import ProductRepository
from gev_api.sales.repository import SaleRepository
from gev_api.system.services import app_status, build_backup

router = APIRouter()


@router.post("/backup", response_model=ApiResponse[dict])
def backup(
        products: ProductRepository = Depends(get_product_repository),
        customers: CustomerRepository = Depends(get_customer_repository),
        sales: SaleRepository = Depends(get_sale_repository)
):
    """
    Export all products, customers, sales and sale lines as JSON.
    """
    try:
        return success_response(build_backup(products, customers, sales),
                                message="Backup realizado com sucesso!")
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.get("/status", response_model=ApiResponse[dict])
def status(session: Session = Depends(get_session)):
    """
    Liveness check with the application name, version and database backend.
    """
    return success_response(app_status(session.get_bind().dialect.name))
