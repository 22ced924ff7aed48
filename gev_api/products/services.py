"""
Business logic for the product catalog.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from gev_api.common.exceptions import NotFoundError, ValidationError
from gev_api.products.models import Product
from gev_api.products.repository import ProductRepository
from gev_api.products.schemas import ProductCreate, ProductOut, ProductUpdate

logger = logging.getLogger(__name__)


def compute_margin(preco_custo: Decimal, preco_venda: Decimal) -> float:
    """
    Profit margin over cost, in percent: (venda - custo) / custo * 100.

    Raises:
        ValidationError: If the cost is not positive
    """
    preco_custo = Decimal(preco_custo)
    preco_venda = Decimal(preco_venda)
    if preco_custo <= 0:
        raise ValidationError("Preço de custo deve ser maior que zero")
    return float((preco_venda - preco_custo) / preco_custo * 100)


def list_products(repo: ProductRepository, search: Optional[str] = None) -> List[ProductOut]:
    """
    Retrieve every product ordered by name, optionally filtered by a name substring.
    """
    return [ProductOut.model_validate(p) for p in repo.list(search)]


def get_product(repo: ProductRepository, product_id: int) -> ProductOut:
    """
    Retrieve a single product.

    Raises:
        NotFoundError: If no product has this id
    """
    return ProductOut.model_validate(_get_or_404(repo, product_id))


def create_product(repo: ProductRepository, data: ProductCreate,
                   imagem: Optional[str] = None) -> ProductOut:
    """
    Create a product, deriving its margin from the two prices.

    Args:
        repo: Catalog repository bound to the request session
        data: Validated product fields
        imagem: Path or URL of an already stored image

    Returns:
        The created product
    """
    product = Product(
        nome=data.nome,
        preco_custo=data.preco_custo,
        preco_venda=data.preco_venda,
        margem_lucro=compute_margin(data.preco_custo, data.preco_venda),
        imagem=imagem,
        observacoes=data.observacoes or "",
        estoque_atual=data.estoque_atual,
    )
    repo.save(product)
    logger.info("Created product %s (%s)", product.id, product.nome)
    return ProductOut.model_validate(product)


def update_product(repo: ProductRepository, product_id: int, data: ProductUpdate,
                   imagem: Optional[str] = None) -> ProductOut:
    """
    Apply a partial update. The margin is recomputed whenever a price is part
    of the update, from the resulting pair of prices.

    Raises:
        NotFoundError: If no product has this id
    """
    product = _get_or_404(repo, product_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    for field, value in changes.items():
        setattr(product, field, value)

    if "preco_custo" in changes or "preco_venda" in changes:
        product.margem_lucro = compute_margin(product.preco_custo, product.preco_venda)

    if imagem:
        product.imagem = imagem

    repo.save(product)
    logger.info("Updated product %s fields=%s", product.id, sorted(changes))
    return ProductOut.model_validate(product)


def delete_product(repo: ProductRepository, product_id: int) -> None:
    """
    Delete a product. Sale line items keep their name and price snapshot.

    Raises:
        NotFoundError: If no product has this id
    """
    product = _get_or_404(repo, product_id)
    repo.remove(product)
    logger.info("Deleted product %s", product_id)


def _get_or_404(repo: ProductRepository, product_id: int) -> Product:
    product = repo.get(product_id)
    if product is None:
        raise NotFoundError("Produto não encontrado")
    return product
