"""
Tests for customer management endpoints.
"""
from gev_api.sales.models import Sale


def _create(client, **fields):
    payload = {"nome": "Cliente", **fields}
    response = client.post("/api/clientes", json=payload)
    assert response.status_code == 201
    return response.json()["data"]


def test_create_and_get_customer(client):
    created = _create(client, nome="  João Lima ", telefone="11 99999-0000", endereco="")

    assert created["nome"] == "João Lima"
    assert created["endereco"] is None
    assert created["total_comprado"] == 0
    assert created["ultima_compra"] is None

    fetched = client.get(f"/api/clientes/{created['id']}").json()
    assert fetched["data"]["telefone"] == "11 99999-0000"


def test_create_customer_without_name_is_rejected(client):
    response = client.post("/api/clientes", json={"telefone": "123"})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_list_and_search_customers(client):
    _create(client, nome="Zeca", telefone="3333-1111")
    _create(client, nome="Bia", telefone="2222-0000")

    listing = client.get("/api/clientes").json()
    assert listing["total"] == 2
    assert [c["nome"] for c in listing["data"]] == ["Bia", "Zeca"]

    by_phone = client.get("/api/clientes", params={"search": "3333"}).json()
    assert [c["nome"] for c in by_phone["data"]] == ["Zeca"]


def test_update_customer(client):
    created = _create(client, nome="Carla")

    response = client.put(f"/api/clientes/{created['id']}", json={"observacoes": "Prefere pix"})

    assert response.status_code == 200
    assert response.json()["data"]["observacoes"] == "Prefere pix"
    assert response.json()["data"]["nome"] == "Carla"
    assert client.put("/api/clientes/999", json={"nome": "X"}).status_code == 404


def test_deleting_a_customer_keeps_its_sales(client, db_session, make_product):
    product = make_product()
    customer = _create(client, nome="Rita")
    sale_id = client.post("/api/vendas", json={
        "itens": [{"produto_id": product.id, "quantidade": 1}],
        "cliente_id": customer["id"],
    }).json()["data"]["id"]

    response = client.delete(f"/api/clientes/{customer['id']}")
    assert response.status_code == 200
    assert client.get(f"/api/clientes/{customer['id']}").status_code == 404

    sale = db_session.get(Sale, sale_id)
    assert sale.cliente_id is None
    assert sale.cliente_nome == "Rita"
