"""
Tests for sale registration, listing and the stock guarantees around it.
"""
import threading
from datetime import datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from gev_api.common.exceptions import (
    InsufficientStockError, NotFoundError, StorageError, ValidationError,
)
from gev_api.customers.models import Customer
from gev_api.customers.repository import CustomerRepository
from gev_api.products.models import Product
from gev_api.products.repository import ProductRepository
from gev_api.products.schemas import ProductUpdate
from gev_api.products.services import update_product
from gev_api.sales.models import Sale, SaleItem
from gev_api.sales.repository import SaleRepository
from gev_api.sales.schemas import SaleCreate
from gev_api.sales.services import create_sale, list_sales, merge_items


def _stock(session, product_id):
    session.expire_all()
    return session.get(Product, product_id).estoque_atual


def _count(session, model):
    return session.scalar(select(func.count()).select_from(model))


def test_sale_totals_come_from_catalog_prices(client, db_session, make_product):
    """Two units at 20 with cost 12 give total 40, cost 24 and profit 16."""
    product = make_product(nome="Chinelo", preco_custo="12.00", preco_venda="20.00", estoque_atual=10)

    response = client.post("/api/vendas", json={"itens": [{"produto_id": product.id, "quantidade": 2}]})

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Venda registrada com sucesso!"
    assert body["data"]["total"] == 40.0
    assert body["data"]["lucro"] == 16.0
    assert body["data"]["itens"] == 1

    detail = client.get(f"/api/vendas/{body['data']['id']}").json()["data"]
    assert detail["custo_total"] == 24.0
    assert detail["cliente_nome"] == "Cliente Avulso"
    assert detail["forma_pagamento"] == "dinheiro"
    assert detail["status"] == "concluida"
    assert detail["parcelas"] == 1
    assert detail["itens"][0]["produto_nome"] == "Chinelo"
    assert detail["itens"][0]["preco_unitario"] == 20.0
    assert detail["itens"][0]["custo_unitario"] == 12.0
    assert detail["itens"][0]["subtotal"] == 40.0

    assert _stock(db_session, product.id) == 8


def test_client_supplied_prices_are_ignored(client, make_product):
    product = make_product(preco_custo="12.00", preco_venda="20.00")

    response = client.post("/api/vendas", json={
        "itens": [{"produto_id": product.id, "quantidade": 1, "preco_unitario": 0.01}],
    })

    assert response.status_code == 201
    assert response.json()["data"]["total"] == 20.0


def test_empty_item_list_writes_nothing(client, db_session):
    response = client.post("/api/vendas", json={"itens": []})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert _count(db_session, Sale) == 0
    assert _count(db_session, SaleItem) == 0


def test_unknown_product_is_not_found_and_nothing_changes(client, db_session, make_product):
    product = make_product(estoque_atual=5)

    response = client.post("/api/vendas", json={"itens": [
        {"produto_id": product.id, "quantidade": 1},
        {"produto_id": 999, "quantidade": 1},
    ]})

    assert response.status_code == 404
    assert _stock(db_session, product.id) == 5
    assert _count(db_session, Sale) == 0


def test_insufficient_stock_is_a_conflict(client, db_session, make_product):
    product = make_product(nome="Relógio", estoque_atual=1)

    response = client.post("/api/vendas", json={"itens": [{"produto_id": product.id, "quantidade": 2}]})

    assert response.status_code == 409
    assert "Relógio" in response.json()["error"]
    assert _stock(db_session, product.id) == 1
    assert _count(db_session, Sale) == 0


def test_repeated_products_are_merged_before_the_stock_check(client, db_session, make_product):
    product = make_product(estoque_atual=3)
    items = [{"produto_id": product.id, "quantidade": 2}, {"produto_id": product.id, "quantidade": 2}]

    assert client.post("/api/vendas", json={"itens": items}).status_code == 409

    items[1]["quantidade"] = 1
    response = client.post("/api/vendas", json={"itens": items})
    assert response.status_code == 201
    assert response.json()["data"]["itens"] == 1
    assert _stock(db_session, product.id) == 0


def test_merge_items_keeps_first_seen_order():
    data = SaleCreate(itens=[
        {"produto_id": 3, "quantidade": 1},
        {"produto_id": 1, "quantidade": 2},
        {"produto_id": 3, "quantidade": 4},
    ])

    assert list(merge_items(data.itens).items()) == [(3, 5), (1, 2)]


@pytest.mark.parametrize("payload", [
    {"itens": [{"produto_id": 1, "quantidade": 0}]},
    {"itens": [{"produto_id": 1, "quantidade": 1}], "forma_pagamento": "cheque"},
    {"itens": [{"produto_id": 1, "quantidade": 1}], "parcelas": 0},
    {"itens": [{"produto_id": 1, "quantidade": 1}], "status": "cancelada"},
])
def test_invalid_sale_requests_are_rejected(client, make_product, payload):
    make_product()

    response = client.post("/api/vendas", json=payload)

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_line_items_keep_their_snapshot(client, repos, make_product):
    catalog, _, _ = repos
    product = make_product(nome="Tênis", preco_custo="100.00", preco_venda="180.00")
    sale_id = client.post("/api/vendas", json={
        "itens": [{"produto_id": product.id, "quantidade": 1}],
    }).json()["data"]["id"]

    update_product(catalog, product.id, ProductUpdate(nome="Tênis Novo", preco_venda=Decimal("250.00")))

    item = client.get(f"/api/vendas/{sale_id}").json()["data"]["itens"][0]
    assert item["produto_nome"] == "Tênis"
    assert item["preco_unitario"] == 180.0

    assert client.delete(f"/api/produtos/{product.id}").status_code == 200
    item = client.get(f"/api/vendas/{sale_id}").json()["data"]["itens"][0]
    assert item["produto_id"] is None
    assert item["produto_nome"] == "Tênis"


def test_sale_with_customer_updates_the_ledger(client, db_session, make_product):
    product = make_product(preco_custo="5.00", preco_venda="12.50")
    customer = client.post("/api/clientes", json={"nome": "Maria"}).json()["data"]

    response = client.post("/api/vendas", json={
        "itens": [{"produto_id": product.id, "quantidade": 2}],
        "cliente_id": customer["id"],
        "forma_pagamento": "cartao",
        "parcelas": 3,
    })
    assert response.status_code == 201

    sale = client.get(f"/api/vendas/{response.json()['data']['id']}").json()["data"]
    assert sale["cliente_nome"] == "Maria"
    assert sale["cliente_id"] == customer["id"]
    assert sale["parcelas"] == 3

    db_session.expire_all()
    stored = db_session.get(Customer, customer["id"])
    assert stored.total_comprado == Decimal("25.00")
    assert stored.ultima_compra is not None


def test_unknown_customer_is_not_found(client, db_session, make_product):
    product = make_product(estoque_atual=4)

    response = client.post("/api/vendas", json={
        "itens": [{"produto_id": product.id, "quantidade": 1}],
        "cliente_id": 42,
    })

    assert response.status_code == 404
    assert response.json()["error"] == "Cliente não encontrado"
    assert _stock(db_session, product.id) == 4


def test_list_sales_by_period(repos, make_product):
    catalog, customers, sales = repos
    product = make_product(estoque_atual=10)
    item = [{"produto_id": product.id, "quantidade": 1}]

    create_sale(catalog, customers, sales, SaleCreate(itens=item), now=datetime(2024, 5, 2, 9, 0))
    create_sale(catalog, customers, sales, SaleCreate(itens=item), now=datetime(2024, 5, 14, 9, 0))
    create_sale(catalog, customers, sales, SaleCreate(itens=item), now=datetime(2024, 5, 20, 8, 0))

    now = datetime(2024, 5, 20, 18, 0)
    assert len(list_sales(sales, "hoje", now=now)) == 1
    assert len(list_sales(sales, "semana", now=now)) == 2
    assert len(list_sales(sales, "mes", now=now)) == 3
    assert len(list_sales(sales, now=now)) == 3

    newest_first = [s.data_venda for s in list_sales(sales, now=now)]
    assert newest_first == sorted(newest_first, reverse=True)

    with pytest.raises(ValidationError):
        list_sales(sales, "ano", now=now)


def test_list_sales_endpoint(client, make_product):
    product = make_product()
    client.post("/api/vendas", json={"itens": [{"produto_id": product.id, "quantidade": 1}]})

    body = client.get("/api/vendas", params={"periodo": "hoje"}).json()
    assert body["success"] is True
    assert body["total"] == 1
    assert client.get("/api/vendas", params={"periodo": "ontem"}).status_code == 400
    assert client.get("/api/vendas/999").status_code == 404


def test_service_rejects_unknown_product(repos):
    catalog, customers, sales = repos

    with pytest.raises(NotFoundError):
        create_sale(catalog, customers, sales, SaleCreate(itens=[{"produto_id": 7, "quantidade": 1}]))


def test_concurrent_sales_of_the_last_unit(session_factory, make_product):
    """Two sales racing for a single unit: exactly one of them goes through."""
    product = make_product(estoque_atual=1)
    barrier = threading.Barrier(2)
    outcomes = []
    lock = threading.Lock()

    def sell():
        session = session_factory()
        try:
            barrier.wait()
            create_sale(
                ProductRepository(session), CustomerRepository(session), SaleRepository(session),
                SaleCreate(itens=[{"produto_id": product.id, "quantidade": 1}]),
            )
            result = "ok"
        except InsufficientStockError:
            result = "sem_estoque"
        finally:
            session.close()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=sell) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert sorted(outcomes) == ["ok", "sem_estoque"]

    check = session_factory()
    try:
        assert check.get(Product, product.id).estoque_atual == 0
        assert _count(check, Sale) == 1
    finally:
        check.close()


def test_storage_failure_rolls_back_stock_and_sale(repos, db_session, make_product):
    """A database error while writing the sale leaves no trace of it."""
    catalog, customers, sales = repos
    first = make_product(nome="Boné", estoque_atual=5)
    second = make_product(nome="Bolsa", estoque_atual=3)
    data = SaleCreate(itens=[
        {"produto_id": first.id, "quantidade": 2},
        {"produto_id": second.id, "quantidade": 1},
    ])
    failure = OperationalError("INSERT INTO vendas", {}, Exception("disk I/O error"))

    with patch.object(SaleRepository, "add", side_effect=failure):
        with pytest.raises(StorageError) as excinfo:
            create_sale(catalog, customers, sales, data)

    assert excinfo.value.__cause__ is failure
    assert _stock(db_session, first.id) == 5
    assert _stock(db_session, second.id) == 3
    assert _count(db_session, Sale) == 0
    assert _count(db_session, SaleItem) == 0


def test_failed_second_decrement_restores_the_first(repos, db_session, make_product):
    """Stock taken by another sale after validation: the lines already decremented are restored."""
    catalog, customers, sales = repos
    first = make_product(nome="Boné", estoque_atual=5)
    second = make_product(nome="Bolsa", estoque_atual=3)
    real_decrement = catalog.decrement_stock

    def decrement(product_id, quantity):
        if product_id == second.id:
            return False
        return real_decrement(product_id, quantity)

    data = SaleCreate(itens=[
        {"produto_id": first.id, "quantidade": 2},
        {"produto_id": second.id, "quantidade": 1},
    ])
    with patch.object(catalog, "decrement_stock", side_effect=decrement) as mock_decrement:
        with pytest.raises(InsufficientStockError):
            create_sale(catalog, customers, sales, data)

    assert mock_decrement.call_count == 2
    assert _stock(db_session, first.id) == 5
    assert _stock(db_session, second.id) == 3
    assert _count(db_session, Sale) == 0
    assert _count(db_session, SaleItem) == 0
