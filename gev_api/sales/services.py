"""
Business logic for registering and reading sales.

A sale is written as one unit of work: stock decrements, the sale header, its
line items and the customer bookkeeping are committed together or not at all.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from gev_api.common.config import now_local
from gev_api.common.exceptions import (
    AppError, InsufficientStockError, NotFoundError, StorageError, ValidationError,
)
from gev_api.common.protocols import CatalogStore, CustomerLedger, SalesStore
from gev_api.common.utils import period_start, to_money
from gev_api.sales.constants import DEFAULT_CUSTOMER_NAME, LISTING_PERIODS
from gev_api.sales.models import Sale, SaleItem
from gev_api.sales.repository import SaleRepository
from gev_api.sales.schemas import SaleCreate, SaleCreated, SaleDetailOut, SaleItemIn, SaleOut

logger = logging.getLogger(__name__)


@dataclass
class PricedLine:
    """A requested line resolved against the catalog."""

    produto_id: int
    produto_nome: str
    quantidade: int
    preco_unitario: Decimal
    custo_unitario: Decimal

    @property
    def subtotal(self) -> Decimal:
        return to_money(self.preco_unitario * self.quantidade)

    @property
    def custo(self) -> Decimal:
        return to_money(self.custo_unitario * self.quantidade)


def merge_items(itens: List[SaleItemIn]) -> "OrderedDict[int, int]":
    """Add up the quantities of repeated product ids, keeping first-seen order."""
    merged: "OrderedDict[int, int]" = OrderedDict()
    for item in itens:
        merged[item.produto_id] = merged.get(item.produto_id, 0) + item.quantidade
    return merged


def price_lines(catalog: CatalogStore, itens: List[SaleItemIn]) -> List[PricedLine]:
    """
    Resolve the requested items against the catalog and check availability.

    Raises:
        ValidationError: If no items were given
        NotFoundError: If a product id does not exist
        InsufficientStockError: If a product has fewer units than requested
    """
    if not itens:
        raise ValidationError("A venda deve conter pelo menos um item")

    quantities = merge_items(itens)
    products = catalog.get_many(quantities.keys())

    lines = []
    for produto_id, quantidade in quantities.items():
        product = products.get(produto_id)
        if product is None:
            raise NotFoundError(f"Produto {produto_id} não encontrado")
        if quantidade > product.estoque_atual:
            raise InsufficientStockError(
                f"Estoque insuficiente para {product.nome}: "
                f"disponível {product.estoque_atual}, solicitado {quantidade}"
            )
        lines.append(PricedLine(
            produto_id=product.id,
            produto_nome=product.nome,
            quantidade=quantidade,
            preco_unitario=to_money(product.preco_venda),
            custo_unitario=to_money(product.preco_custo),
        ))
    return lines


def create_sale(catalog: CatalogStore, customers: CustomerLedger, sales: SalesStore,
                data: SaleCreate, now: Optional[datetime] = None) -> SaleCreated:
    """
    Register a sale.

    The three stores must share one transaction. Stock is decremented first
    with a conditional update, so a concurrent sale that took the last units
    makes this one fail instead of driving the stock negative.

    Args:
        catalog: Product lookups and stock movements
        customers: Customer lookups and purchase bookkeeping
        sales: Sale persistence, also owning commit and rollback
        data: Validated sale request
        now: Sale timestamp, defaults to the current local time

    Returns:
        The new sale id, its total and profit, and how many lines it has

    Raises:
        ValidationError, NotFoundError, InsufficientStockError: Nothing is written
        StorageError: The database rejected the unit of work, which was rolled back
    """
    lines = price_lines(catalog, data.itens)

    customer = None
    if data.cliente_id is not None:
        customer = customers.get(data.cliente_id)
        if customer is None:
            raise NotFoundError("Cliente não encontrado")

    total = to_money(sum((line.subtotal for line in lines), Decimal("0")))
    custo_total = to_money(sum((line.custo for line in lines), Decimal("0")))
    lucro = to_money(total - custo_total)
    when = now or now_local()

    try:
        for line in lines:
            if not catalog.decrement_stock(line.produto_id, line.quantidade):
                raise InsufficientStockError(f"Estoque insuficiente para {line.produto_nome}")

        sale = Sale(
            cliente_id=customer.id if customer else None,
            cliente_nome=data.cliente_nome or (customer.nome if customer else DEFAULT_CUSTOMER_NAME),
            total=total,
            custo_total=custo_total,
            lucro=lucro,
            forma_pagamento=data.forma_pagamento.value,
            parcelas=data.parcelas,
            status=data.status.value,
            observacoes=data.observacoes,
            data_venda=when,
            itens=[
                SaleItem(
                    produto_id=line.produto_id,
                    produto_nome=line.produto_nome,
                    quantidade=line.quantidade,
                    preco_unitario=line.preco_unitario,
                    custo_unitario=line.custo_unitario,
                    subtotal=line.subtotal,
                )
                for line in lines
            ],
        )
        sales.add(sale)

        if customer is not None:
            customers.register_purchase(customer.id, total, when)

        sales.commit()
    except AppError:
        sales.rollback()
        raise
    except SQLAlchemyError as e:
        sales.rollback()
        logger.error("Sale transaction failed: %s", e)
        raise StorageError() from e

    logger.info("Registered sale %s: %d line(s), total=%s lucro=%s", sale.id, len(lines), total, lucro)
    return SaleCreated(id=sale.id, total=float(total), lucro=float(lucro), itens=len(lines))


def list_sales(repo: SaleRepository, periodo: Optional[str] = None,
               cliente_id: Optional[int] = None, now: Optional[datetime] = None) -> List[SaleOut]:
    """
    List sale headers, newest first.

    Raises:
        ValidationError: If ``periodo`` is not one of hoje, semana or mes
    """
    since = None
    if periodo:
        if periodo not in LISTING_PERIODS:
            raise ValidationError(f"Período inválido: {periodo}")
        since = period_start(periodo, now or now_local())
    return [SaleOut.model_validate(s) for s in repo.list(since, cliente_id)]


def get_sale(repo: SaleRepository, sale_id: int) -> SaleDetailOut:
    sale = repo.get(sale_id)
    if sale is None:
        raise NotFoundError("Venda não encontrada")
    return SaleDetailOut.model_validate(sale)
