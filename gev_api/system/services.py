"""
Operational helpers: full data export and liveness information.
"""
import logging
from typing import Any, Dict

from gev_api.common.config import APP_NAME, APP_VERSION, now_local
from gev_api.customers.repository import CustomerRepository
from gev_api.customers.schemas import CustomerOut
from gev_api.products.repository import ProductRepository
from gev_api.products.schemas import ProductOut
from gev_api.sales.repository import SaleRepository
from gev_api.sales.schemas import SaleItemOut, SaleOut

logger = logging.getLogger(__name__)


def build_backup(products: ProductRepository, customers: CustomerRepository,
                 sales: SaleRepository) -> Dict[str, Any]:
    """
    Dump every product, customer, sale and sale line.

    Returns:
        A dict with ``produtos``, ``clientes``, ``vendas`` and ``vendas_itens``
        lists plus the ``gerado_em`` timestamp
    """
    all_sales = sales.list_with_items()
    items = []
    for sale in all_sales:
        for item in sale.itens:
            items.append({"venda_id": sale.id, **SaleItemOut.model_validate(item).model_dump(mode="json")})

    backup = {
        "produtos": [ProductOut.model_validate(p) for p in products.list()],
        "clientes": [CustomerOut.model_validate(c) for c in customers.list()],
        "vendas": [SaleOut.model_validate(s) for s in all_sales],
        "vendas_itens": items,
        "gerado_em": now_local().isoformat(),
    }
    logger.info("Backup generated: %d product(s), %d customer(s), %d sale(s)",
                len(backup["produtos"]), len(backup["clientes"]), len(backup["vendas"]))
    return backup


def app_status(database: str) -> Dict[str, str]:
    return {
        "app": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "database": database,
        "timestamp": now_local().isoformat(),
    }
