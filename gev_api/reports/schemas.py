"""
Report payloads for the dashboard and the reports screen.
"""
from typing import List, Optional

from pydantic import BaseModel


class DailySales(BaseModel):
    data: str
    total_vendas: float
    lucro: float
    quantidade_vendas: int


class TopProduct(BaseModel):
    produto_id: Optional[int] = None
    produto_nome: str
    total_vendido: int
    receita_total: float


class FinancialSummary(BaseModel):
    """
    Totals over the selected window. ``margem_media`` is profit over revenue,
    in percent.
    """
    total_vendas: int
    receita_total: float
    custo_total: float
    lucro_total: float
    ticket_medio: float
    margem_media: float


class ReportData(BaseModel):
    vendas_diarias: List[DailySales]
    top_produtos: List[TopProduct]
    resumo_financeiro: FinancialSummary


class DashboardDay(BaseModel):
    dia: str
    total_vendido: float
    lucro: float


class DashboardData(BaseModel):
    """Current month at a glance."""
    vendas_mes: float
    total_produtos: int
    lucro_mes: float
    vendas_pendentes: int
    historico: List[DashboardDay]
