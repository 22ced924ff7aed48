from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.orm import selectinload

from gev_api.common.protocols import DailyTotals, ProductRanking, SalesSummary
from gev_api.common.repository import SqlRepository
from gev_api.common.utils import to_money
from gev_api.sales.models import Sale, SaleItem


def _within(query: Select, start: Optional[datetime], end: Optional[datetime]) -> Select:
    if start is not None:
        query = query.where(Sale.data_venda >= start)
    if end is not None:
        query = query.where(Sale.data_venda <= end)
    return query


def _as_date(value) -> date:
    # SQLite's date() yields ISO strings, other backends return dates
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


class SaleRepository(SqlRepository):
    """SQLAlchemy implementation of the sales store."""

    def add(self, sale: Sale) -> Sale:
        self.session.add(sale)
        self.session.flush()
        return sale

    def get(self, sale_id: int) -> Optional[Sale]:
        query = select(Sale).options(selectinload(Sale.itens)).where(Sale.id == sale_id)
        return self.session.scalars(query).first()

    def list(self, since: Optional[datetime] = None, cliente_id: Optional[int] = None) -> List[Sale]:
        query = _within(select(Sale), since, None).order_by(Sale.data_venda.desc(), Sale.id.desc())
        if cliente_id is not None:
            query = query.where(Sale.cliente_id == cliente_id)
        return list(self.session.scalars(query))

    def list_with_items(self) -> List[Sale]:
        query = select(Sale).options(selectinload(Sale.itens)).order_by(Sale.id.asc())
        return list(self.session.scalars(query))

    def summarize(self, start: Optional[datetime], end: Optional[datetime]) -> SalesSummary:
        query = _within(select(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.total), 0),
            func.coalesce(func.sum(Sale.custo_total), 0),
            func.coalesce(func.sum(Sale.lucro), 0),
        ), start, end)
        count, receita, custo, lucro = self.session.execute(query).one()
        return SalesSummary(
            count=int(count or 0),
            receita=to_money(receita),
            custo=to_money(custo),
            lucro=to_money(lucro),
        )

    def daily_totals(self, start: Optional[datetime], end: Optional[datetime]) -> List[DailyTotals]:
        dia = func.date(Sale.data_venda).label("dia")
        query = _within(select(
            dia,
            func.coalesce(func.sum(Sale.total), 0),
            func.coalesce(func.sum(Sale.lucro), 0),
            func.count(Sale.id),
        ), start, end).group_by(dia).order_by(dia)
        return [
            DailyTotals(dia=_as_date(row[0]), receita=to_money(row[1]),
                        lucro=to_money(row[2]), quantidade=int(row[3]))
            for row in self.session.execute(query)
        ]

    def top_products(self, start: Optional[datetime], end: Optional[datetime],
                     limit: int) -> List[ProductRanking]:
        vendido = func.sum(SaleItem.quantidade)
        receita = func.coalesce(func.sum(SaleItem.subtotal), 0)
        query = _within(
            select(SaleItem.produto_id, SaleItem.produto_nome, vendido, receita)
            .join(Sale, Sale.id == SaleItem.venda_id),
            start, end,
        ).group_by(SaleItem.produto_id, SaleItem.produto_nome) \
            .order_by(vendido.desc(), receita.desc(), SaleItem.produto_nome.asc()) \
            .limit(limit)
        return [
            ProductRanking(produto_id=row[0], produto_nome=row[1],
                           total_vendido=int(row[2] or 0), receita_total=to_money(row[3]))
            for row in self.session.execute(query)
        ]

    def first_sale_at(self) -> Optional[datetime]:
        return self.session.scalar(select(func.min(Sale.data_venda)))

    def count_by_status(self, status: str) -> int:
        return self.session.scalar(select(func.count(Sale.id)).where(Sale.status == status)) or 0
