"""
FastAPI dependencies that bind repositories to the request session.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from gev_api.auth.repository import UserRepository
from gev_api.common.database import get_session
from gev_api.customers.repository import CustomerRepository
from gev_api.products.repository import ProductRepository
from gev_api.sales.repository import SaleRepository


def get_product_repository(session: Session = Depends(get_session)) -> ProductRepository:
    return ProductRepository(session)


def get_customer_repository(session: Session = Depends(get_session)) -> CustomerRepository:
    return CustomerRepository(session)


def get_sale_repository(session: Session = Depends(get_session)) -> SaleRepository:
    return SaleRepository(session)


def get_user_repository(session: Session = Depends(get_session)) -> UserRepository:
    return UserRepository(session)
