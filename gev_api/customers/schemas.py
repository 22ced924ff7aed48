"""
Customer schemas for CRUD operations.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from gev_api.common.schemas import ORMModel


class CustomerCreate(BaseModel):
    """
    Schema for creating a new customer.
    """
    nome: str = Field(..., min_length=1, max_length=255)
    telefone: Optional[str] = Field(None, max_length=40)
    endereco: Optional[str] = Field(None, max_length=512)
    observacoes: str = ""

    @field_validator('nome')
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Nome é obrigatório")
        return value

    @field_validator('telefone', 'endereco', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty strings from forms as missing values."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class CustomerUpdate(BaseModel):
    """
    Schema for updating a customer. Only provided fields are changed.
    """
    nome: Optional[str] = Field(None, min_length=1, max_length=255)
    telefone: Optional[str] = Field(None, max_length=40)
    endereco: Optional[str] = Field(None, max_length=512)
    observacoes: Optional[str] = None


class CustomerOut(ORMModel):
    id: int
    nome: str
    telefone: Optional[str] = None
    endereco: Optional[str] = None
    observacoes: str = ""
    total_comprado: float = 0.0
    ultima_compra: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_serializer('ultima_compra', 'created_at')
    def serialize_datetime(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None
