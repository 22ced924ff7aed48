"""
Customer management routers with full CRUD operations.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from starlette import status

from gev_api.common.dependencies import get_customer_repository
from gev_api.common.exceptions import AppError
from gev_api.common.responses import app_error_response, success_response, unexpected_error_response
from gev_api.common.schemas import ApiResponse
from gev_api.customers.repository import CustomerRepository
from gev_api.customers.schemas import CustomerCreate, CustomerOut, CustomerUpdate
from gev_api.customers.services import (
    create_customer, delete_customer, get_customer, list_customers, update_customer,
)

router = APIRouter()


@router.get("", response_model=ApiResponse[list[CustomerOut]])
def list_customers_endpoint(
        search: Optional[str] = Query(None, description="Filter by name or phone"),
        repo: CustomerRepository = Depends(get_customer_repository)
):
    """
    List customers ordered by name.
    """
    try:
        customers = list_customers(repo, search)
        return success_response(customers, total=len(customers))
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.get("/{customer_id}", response_model=ApiResponse[CustomerOut])
def get_customer_endpoint(
        customer_id: int = Path(..., description="Customer ID"),
        repo: CustomerRepository = Depends(get_customer_repository)
):
    try:
        return success_response(get_customer(repo, customer_id))
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.post("", response_model=ApiResponse[CustomerOut], status_code=status.HTTP_201_CREATED)
def create_customer_endpoint(
        customer_data: CustomerCreate,
        repo: CustomerRepository = Depends(get_customer_repository)
):
    """
    Create a new customer.
    """
    try:
        customer = create_customer(repo, customer_data)
        return success_response(customer, message="Cliente criado com sucesso!",
                                status_code=status.HTTP_201_CREATED)
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.put("/{customer_id}", response_model=ApiResponse[CustomerOut])
def update_customer_endpoint(
        customer_data: CustomerUpdate,
        customer_id: int = Path(..., description="Customer ID"),
        repo: CustomerRepository = Depends(get_customer_repository)
):
    """
    Update customer information.
    """
    try:
        customer = update_customer(repo, customer_id, customer_data)
        return success_response(customer, message="Cliente atualizado com sucesso!")
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.delete("/{customer_id}", response_model=ApiResponse[dict])
def delete_customer_endpoint(
        customer_id: int = Path(..., description="Customer ID"),
        repo: CustomerRepository = Depends(get_customer_repository)
):
    """
    Delete a customer; its sales are kept without the link.
    """
    try:
        delete_customer(repo, customer_id)
        return success_response({"id": customer_id}, message="Cliente excluído com sucesso!")
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)
