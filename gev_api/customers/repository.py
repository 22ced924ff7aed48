from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_, select, update

from gev_api.common.repository import SqlRepository
from gev_api.customers.models import Customer


class CustomerRepository(SqlRepository):
    """SQLAlchemy implementation of the customer ledger."""

    def get(self, customer_id: int) -> Optional[Customer]:
        return self.session.get(Customer, customer_id)

    def list(self, search: Optional[str] = None) -> List[Customer]:
        query = select(Customer).order_by(Customer.nome.asc(), Customer.id.asc())
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(Customer.nome.ilike(pattern), Customer.telefone.ilike(pattern)))
        return list(self.session.scalars(query))

    def register_purchase(self, customer_id: int, amount: Decimal, when: datetime) -> None:
        # Runs inside the sale transaction; the caller commits
        self.session.execute(
            update(Customer)
            .where(Customer.id == customer_id)
            .values(total_comprado=Customer.total_comprado + amount, ultima_compra=when)
            .execution_options(synchronize_session=False)
        )
