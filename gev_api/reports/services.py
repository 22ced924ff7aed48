"""
Sales metrics over calendar windows.

Every function takes ``now`` so a window can be evaluated at any instant;
the routers pass the current local time.
"""
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterator, List, Optional

from gev_api.common.config import now_local
from gev_api.common.protocols import DailyTotals, SalesStore
from gev_api.common.utils import period_start, round_percent, to_money
from gev_api.reports.schemas import (
    DailySales, DashboardData, DashboardDay, FinancialSummary, ReportData, TopProduct,
)

logger = logging.getLogger(__name__)

DEFAULT_TOP_LIMIT = 5


def _days(first: date, last: date) -> Iterator[date]:
    day = first
    while day <= last:
        yield day
        day += timedelta(days=1)


def fill_daily_series(totals: List[DailyTotals], first: Optional[date], last: date) -> List[DailyTotals]:
    """
    Expand per-day totals to one entry per calendar day from ``first`` to
    ``last``, inclusive. Days without sales get zeros.
    """
    by_day: Dict[date, DailyTotals] = {t.dia: t for t in totals}
    if first is None:
        return []
    zero = Decimal("0.00")
    return [by_day.get(day) or DailyTotals(dia=day, receita=zero, lucro=zero, quantidade=0)
            for day in _days(first, last)]


def financial_summary(store: SalesStore, start: Optional[datetime], end: datetime) -> FinancialSummary:
    summary = store.summarize(start, end)
    ticket = to_money(summary.receita / summary.count) if summary.count else Decimal("0.00")
    margem = summary.lucro / summary.receita * 100 if summary.receita else 0
    return FinancialSummary(
        total_vendas=summary.count,
        receita_total=float(summary.receita),
        custo_total=float(summary.custo),
        lucro_total=float(summary.lucro),
        ticket_medio=float(ticket),
        margem_media=round_percent(margem),
    )


def build_report(store: SalesStore, periodo: str = "mes", limite: int = DEFAULT_TOP_LIMIT,
                 now: Optional[datetime] = None) -> ReportData:
    """
    Build the reports screen payload for a window.

    Args:
        store: Sales store to aggregate
        periodo: hoje, semana, mes or total
        limite: How many products the ranking keeps
        now: End of the window

    Returns:
        Daily series (zero-filled), product ranking and financial summary

    Raises:
        ValidationError: For an unknown period
    """
    now = now or now_local()
    start = period_start(periodo, now)

    first_day = start.date() if start is not None else None
    if first_day is None:
        first_sale = store.first_sale_at()
        first_day = first_sale.date() if first_sale else None

    series = fill_daily_series(store.daily_totals(start, now), first_day, now.date())
    ranking = store.top_products(start, now, limite)

    logger.debug("Built %s report: %d day(s), %d product(s)", periodo, len(series), len(ranking))
    return ReportData(
        vendas_diarias=[
            DailySales(data=d.dia.isoformat(), total_vendas=float(d.receita),
                       lucro=float(d.lucro), quantidade_vendas=d.quantidade)
            for d in series
        ],
        top_produtos=[
            TopProduct(produto_id=r.produto_id, produto_nome=r.produto_nome,
                       total_vendido=r.total_vendido, receita_total=float(r.receita_total))
            for r in ranking
        ],
        resumo_financeiro=financial_summary(store, start, now),
    )


def build_dashboard(store: SalesStore, total_produtos: int,
                    now: Optional[datetime] = None) -> DashboardData:
    """Month-to-date figures with the daily history of the current month."""
    now = now or now_local()
    start = period_start("mes", now)

    summary = store.summarize(start, now)
    series = fill_daily_series(store.daily_totals(start, now), start.date(), now.date())

    return DashboardData(
        vendas_mes=float(summary.receita),
        total_produtos=total_produtos,
        lucro_mes=float(summary.lucro),
        vendas_pendentes=store.count_by_status("pendente"),
        historico=[
            DashboardDay(dia=d.dia.isoformat(), total_vendido=float(d.receita), lucro=float(d.lucro))
            for d in series
        ],
    )
