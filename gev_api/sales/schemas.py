"""
This module defines the Pydantic models used for sales.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from gev_api.common.schemas import ORMModel


class PaymentMethod(str, Enum):
    DINHEIRO = "dinheiro"
    CARTAO = "cartao"
    PIX = "pix"


class SaleStatus(str, Enum):
    CONCLUIDA = "concluida"
    PENDENTE = "pendente"


class SaleItemIn(BaseModel):
    """
    One requested line. Prices always come from the catalog, never from the client.
    """
    produto_id: int
    quantidade: int = Field(..., gt=0)


class SaleCreate(BaseModel):
    """
    Represents the request data for registering a sale.
    """
    itens: List[SaleItemIn] = Field(default_factory=list)
    cliente_id: Optional[int] = None
    cliente_nome: Optional[str] = Field(None, max_length=255)
    forma_pagamento: PaymentMethod = PaymentMethod.DINHEIRO
    parcelas: int = Field(1, ge=1)
    status: SaleStatus = SaleStatus.CONCLUIDA
    observacoes: str = ""

    @field_validator('cliente_nome', mode='before')
    @classmethod
    def blank_name_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator('observacoes', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v


class SaleCreated(BaseModel):
    """Result of a registered sale: id, totals and the number of lines."""
    id: int
    total: float
    lucro: float
    itens: int


class SaleItemOut(ORMModel):
    id: int
    produto_id: Optional[int] = None
    produto_nome: str
    quantidade: int
    preco_unitario: float
    custo_unitario: float
    subtotal: float


class SaleOut(ORMModel):
    """
    Represents a sale header as returned by the listing.
    """
    id: int
    cliente_id: Optional[int] = None
    cliente_nome: str
    total: float
    custo_total: float
    lucro: float
    forma_pagamento: str
    parcelas: int
    status: str
    observacoes: str = ""
    data_venda: datetime

    @field_serializer('data_venda')
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()


class SaleDetailOut(SaleOut):
    """A sale with its line items."""
    itens: List[SaleItemOut] = []
