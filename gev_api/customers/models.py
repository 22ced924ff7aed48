from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gev_api.common.config import now_local
from gev_api.common.database import Base


class Customer(Base):
    __tablename__ = "clientes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nome: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    telefone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    endereco: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    observacoes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Maintained by the sale pipeline
    total_comprado: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    ultima_compra: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=now_local)

    def __repr__(self) -> str:
        return f"<Customer id={self.id} nome={self.nome!r}>"
