"""
Business logic for customer management.
"""
import logging
from typing import List, Optional

from gev_api.common.exceptions import NotFoundError
from gev_api.customers.models import Customer
from gev_api.customers.repository import CustomerRepository
from gev_api.customers.schemas import CustomerCreate, CustomerOut, CustomerUpdate

logger = logging.getLogger(__name__)


def list_customers(repo: CustomerRepository, search: Optional[str] = None) -> List[CustomerOut]:
    return [CustomerOut.model_validate(c) for c in repo.list(search)]


def get_customer(repo: CustomerRepository, customer_id: int) -> CustomerOut:
    return CustomerOut.model_validate(_get_or_404(repo, customer_id))


def create_customer(repo: CustomerRepository, data: CustomerCreate) -> CustomerOut:
    customer = Customer(
        nome=data.nome,
        telefone=data.telefone,
        endereco=data.endereco,
        observacoes=data.observacoes or "",
    )
    repo.save(customer)
    logger.info("Created customer %s", customer.id)
    return CustomerOut.model_validate(customer)


def update_customer(repo: CustomerRepository, customer_id: int, data: CustomerUpdate) -> CustomerOut:
    """
    Apply a partial update to a customer.

    Raises:
        NotFoundError: If no customer has this id
    """
    customer = _get_or_404(repo, customer_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("nome") is None:
        changes.pop("nome", None)

    for field, value in changes.items():
        setattr(customer, field, value)

    repo.save(customer)
    logger.info("Updated customer %s fields=%s", customer.id, sorted(changes))
    return CustomerOut.model_validate(customer)


def delete_customer(repo: CustomerRepository, customer_id: int) -> None:
    """
    Delete a customer. Its sales stay, detached, with their ``cliente_nome``.
    """
    customer = _get_or_404(repo, customer_id)
    repo.remove(customer)
    logger.info("Deleted customer %s", customer_id)


def _get_or_404(repo: CustomerRepository, customer_id: int) -> Customer:
    customer = repo.get(customer_id)
    if customer is None:
        raise NotFoundError("Cliente não encontrado")
    return customer
