from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select, update

from gev_api.common.repository import SqlRepository
from gev_api.products.models import Product


class ProductRepository(SqlRepository):
    """SQLAlchemy implementation of the catalog store."""

    def get(self, product_id: int) -> Optional[Product]:
        return self.session.get(Product, product_id)

    def get_many(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        ids = set(product_ids)
        if not ids:
            return {}
        rows = self.session.scalars(select(Product).where(Product.id.in_(ids)))
        return {product.id: product for product in rows}

    def list(self, search: Optional[str] = None) -> List[Product]:
        query = select(Product).order_by(Product.nome.asc(), Product.id.asc())
        if search:
            query = query.where(Product.nome.ilike(f"%{search.strip()}%"))
        return list(self.session.scalars(query))

    def count(self) -> int:
        return self.session.scalar(select(func.count(Product.id))) or 0

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        # Check and decrement in one statement so concurrent sales cannot oversell
        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.estoque_atual >= quantity)
            .values(estoque_atual=Product.estoque_atual - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
