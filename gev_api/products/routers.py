"""
This module contains the FastAPI routers for product endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile
from fastapi.encoders import jsonable_encoder
from starlette import status
from starlette.concurrency import run_in_threadpool

from gev_api.common import cache
from gev_api.common.dependencies import get_product_repository
from gev_api.common.exceptions import AppError
from gev_api.common.responses import app_error_response, success_response, unexpected_error_response
from gev_api.common.schemas import ApiResponse
from gev_api.common.storage import delete_image, upload_image
from gev_api.common.utils import parse_model
from gev_api.products.repository import ProductRepository
from gev_api.products.schemas import ProductCreate, ProductOut, ProductUpdate
from gev_api.products.services import (
    create_product, delete_product, get_product, list_products, update_product,
)

router = APIRouter()


def _form_data(**fields) -> dict:
    # Multipart clients send empty strings for untouched inputs
    return {k: v for k, v in fields.items() if v is not None and not (v == "" and k != "observacoes")}


@router.get("", response_model=ApiResponse[list[ProductOut]])
async def list_products_endpoint(
        search: Optional[str] = Query(None, description="Filter by a substring of the product name"),
        repo: ProductRepository = Depends(get_product_repository)
):
    """
    List products ordered by name.

    Args:
        search: Optional case-insensitive name filter
        repo: Catalog repository (injected)

    Returns:
        Envelope with the products and their count
    """
    try:
        cache_key = cache.generate_cache_key(cache.PRODUCTS_PREFIX, {"search": search or None})
        cached = await cache.get_cache(cache_key)
        if cached is not None:
            return success_response(cached, total=len(cached))

        products = jsonable_encoder(await run_in_threadpool(list_products, repo, search))
        await cache.set_cache(cache_key, products)
        return success_response(products, total=len(products))
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.get("/{product_id}", response_model=ApiResponse[ProductOut])
def get_product_endpoint(
        product_id: int = Path(..., description="The ID of the product to retrieve"),
        repo: ProductRepository = Depends(get_product_repository)
):
    """
    Get a product by ID.
    """
    try:
        return success_response(get_product(repo, product_id))
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)


@router.post("", response_model=ApiResponse[ProductOut], status_code=status.HTTP_201_CREATED)
async def create_product_endpoint(
        nome: Optional[str] = Form(None),
        preco_custo: Optional[str] = Form(None),
        preco_venda: Optional[str] = Form(None),
        observacoes: Optional[str] = Form(None),
        estoque_atual: Optional[str] = Form(None),
        imagem: Optional[UploadFile] = File(None),
        repo: ProductRepository = Depends(get_product_repository)
):
    """
    Create a product from a multipart form with an optional ``imagem`` file.

    Returns:
        Envelope with the created product, margin included
    """
    image_path = None
    try:
        data = parse_model(ProductCreate, _form_data(
            nome=nome, preco_custo=preco_custo, preco_venda=preco_venda,
            observacoes=observacoes, estoque_atual=estoque_atual,
        ))
        image_path = await upload_image(imagem) if imagem and imagem.filename else None

        product = await run_in_threadpool(create_product, repo, data, image_path)
    except AppError as e:
        delete_image(image_path)
        return app_error_response(e)
    except Exception as e:
        delete_image(image_path)
        return unexpected_error_response(e)

    await cache.invalidate_products()
    await cache.invalidate_reports()
    return success_response(product, message="Produto criado com sucesso!",
                            status_code=status.HTTP_201_CREATED)


@router.put("/{product_id}", response_model=ApiResponse[ProductOut])
async def update_product_endpoint(
        product_id: int = Path(..., description="The ID of the product to update"),
        nome: Optional[str] = Form(None),
        preco_custo: Optional[str] = Form(None),
        preco_venda: Optional[str] = Form(None),
        observacoes: Optional[str] = Form(None),
        estoque_atual: Optional[str] = Form(None),
        imagem: Optional[UploadFile] = File(None),
        repo: ProductRepository = Depends(get_product_repository)
):
    """
    Update the given fields of a product; a new ``imagem`` replaces the old one.
    """
    image_path = None
    try:
        data = parse_model(ProductUpdate, _form_data(
            nome=nome, preco_custo=preco_custo, preco_venda=preco_venda,
            observacoes=observacoes, estoque_atual=estoque_atual,
        ))
        # Fail before storing the image when the product does not exist
        previous_image = (await run_in_threadpool(get_product, repo, product_id)).imagem
        image_path = await upload_image(imagem) if imagem and imagem.filename else None

        product = await run_in_threadpool(update_product, repo, product_id, data, image_path)
    except AppError as e:
        delete_image(image_path)
        return app_error_response(e)
    except Exception as e:
        delete_image(image_path)
        return unexpected_error_response(e)

    if image_path and previous_image != image_path:
        delete_image(previous_image)
    await cache.invalidate_products()
    await cache.invalidate_reports()
    return success_response(product, message="Produto atualizado com sucesso!")


@router.delete("/{product_id}", response_model=ApiResponse[dict])
async def delete_product_endpoint(
        product_id: int = Path(..., description="The ID of the product to delete"),
        repo: ProductRepository = Depends(get_product_repository)
):
    """
    Delete a product by ID.
    """
    try:
        image = (await run_in_threadpool(get_product, repo, product_id)).imagem
        await run_in_threadpool(delete_product, repo, product_id)
    except AppError as e:
        return app_error_response(e)
    except Exception as e:
        return unexpected_error_response(e)

    delete_image(image)
    await cache.invalidate_products()
    await cache.invalidate_reports()
    return success_response({"id": product_id}, message="Produto excluído com sucesso!")
