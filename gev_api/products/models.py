from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gev_api.common.config import now_local
from gev_api.common.database import Base


class Product(Base):
    __tablename__ = "produtos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nome: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    preco_custo: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    preco_venda: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    # Derived from the two prices on every write, kept at full precision
    margem_lucro: Mapped[float] = mapped_column(Float, nullable=False)
    imagem: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    observacoes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    estoque_atual: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=now_local)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=now_local,
                                                 onupdate=now_local)

    __table_args__ = (
        CheckConstraint("preco_custo > 0", name="ck_produtos_preco_custo_positivo"),
        CheckConstraint("preco_venda > 0", name="ck_produtos_preco_venda_positivo"),
        CheckConstraint("estoque_atual >= 0", name="ck_produtos_estoque_nao_negativo"),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} nome={self.nome!r}>"
