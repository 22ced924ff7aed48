from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gev_api.common.config import now_local
from gev_api.common.database import Base
from gev_api.sales.constants import DEFAULT_CUSTOMER_NAME


class Sale(Base):
    """A sale header. Written once, never updated."""

    __tablename__ = "vendas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cliente_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("clientes.id", ondelete="SET NULL"), nullable=True, index=True)
    cliente_nome: Mapped[str] = mapped_column(String(255), nullable=False, default=DEFAULT_CUSTOMER_NAME)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    custo_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    lucro: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    forma_pagamento: Mapped[str] = mapped_column(String(20), nullable=False, default="dinheiro")
    parcelas: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="concluida", index=True)
    observacoes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    data_venda: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=now_local, index=True)

    itens: Mapped[List["SaleItem"]] = relationship(
        back_populates="venda", cascade="all, delete-orphan", order_by="SaleItem.id")

    __table_args__ = (
        CheckConstraint("parcelas >= 1", name="ck_vendas_parcelas_minimo"),
    )

    def __repr__(self) -> str:
        return f"<Sale id={self.id} total={self.total}>"


class SaleItem(Base):
    """A sale line with the product name and prices as they were at sale time."""

    __tablename__ = "vendas_itens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    venda_id: Mapped[int] = mapped_column(
        ForeignKey("vendas.id", ondelete="CASCADE"), nullable=False, index=True)
    produto_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("produtos.id", ondelete="SET NULL"), nullable=True, index=True)
    produto_nome: Mapped[str] = mapped_column(String(255), nullable=False)
    quantidade: Mapped[int] = mapped_column(Integer, nullable=False)
    preco_unitario: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    custo_unitario: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    venda: Mapped[Sale] = relationship(back_populates="itens")

    __table_args__ = (
        CheckConstraint("quantidade > 0", name="ck_vendas_itens_quantidade_positiva"),
    )
