"""
This module defines the Pydantic models used for product management.
These models are used for request and response validation and serialization.
"""

from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from gev_api.common.schemas import ORMModel, TimestampMixin

Money = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


def _clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Nome é obrigatório")
    return value


class ProductBase(BaseModel):
    """
    Fields shared by the create request and the stored product.
    """
    nome: str = Field(..., min_length=1, max_length=255)
    preco_custo: Money
    preco_venda: Money
    observacoes: str = ""
    estoque_atual: int = Field(0, ge=0)

    @field_validator('nome')
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _clean_name(value)


class ProductCreate(ProductBase):
    """
    Represents the request data for creating a new product.
    """
    pass


class ProductUpdate(BaseModel):
    """
    Represents the request data for updating an existing product.
    All fields are optional as only provided fields will be updated.
    """
    nome: Optional[str] = Field(None, min_length=1, max_length=255)
    preco_custo: Optional[Money] = None
    preco_venda: Optional[Money] = None
    observacoes: Optional[str] = None
    estoque_atual: Optional[int] = Field(None, ge=0)

    @field_validator('nome')
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return _clean_name(value) if value is not None else value


class ProductOut(ORMModel, TimestampMixin):
    """
    Represents a product as returned to clients.
    """
    id: int
    nome: str
    preco_custo: float
    preco_venda: float
    margem_lucro: float
    imagem: Optional[str] = None
    observacoes: str = ""
    estoque_atual: int

    @field_serializer('margem_lucro')
    def serialize_margin(self, value: float) -> str:
        """Margins are displayed with two decimals, e.g. ``"30.00"``."""
        return f"{value:.2f}"
