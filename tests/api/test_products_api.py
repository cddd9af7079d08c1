import uuid
from decimal import Decimal

from agri_api.db.models import Product

NEW_PRODUCT = {
    'name': 'Maize meal',
    'description': 'Stone-ground white maize, 10kg.',
    'price': '120.50',
    'quantity': 15,
    'production_date': '2025-05-20T00:00:00',
}


def test_farmer_creates_product_for_themselves(client, db, farmer, category, auth):
    resp = client.post('/api/Product', json={**NEW_PRODUCT, 'category_id': category.id}, headers=auth(farmer))
    assert resp.status_code == 200
    body = resp.json()
    assert body['farmer_id'] == farmer.id
    assert body['farmer_name'] == 'Jane Mokoena'
    assert body['category_name'] == 'Dairy'
    assert Decimal(str(body['price'])) == Decimal('120.50')
    assert db.query(Product).filter(Product.name == 'Maize meal').count() == 1


def test_employee_cannot_create_product(client, employee, category, auth):
    resp = client.post('/api/Product', json={**NEW_PRODUCT, 'category_id': category.id}, headers=auth(employee))
    assert resp.status_code == 403


def test_create_product_unknown_category(client, farmer, auth):
    resp = client.post('/api/Product', json={**NEW_PRODUCT, 'category_id': str(uuid.uuid4())}, headers=auth(farmer))
    assert resp.status_code == 404


def test_create_product_validation(client, farmer, category, auth):
    payload = {**NEW_PRODUCT, 'category_id': category.id, 'price': '0', 'quantity': 0, 'name': 'x' * 101}
    resp = client.post('/api/Product', json=payload, headers=auth(farmer))
    assert resp.status_code == 400
    assert {'price', 'quantity', 'name'} <= set(resp.json())


def test_product_lists(client, employee, farmer, other_farmer, category, product, auth):
    headers = auth(employee)
    assert [p['id'] for p in client.get('/api/Product/all', headers=headers).json()] == [product.id]
    assert len(client.get(f'/api/Product/category/{category.id}', headers=headers).json()) == 1
    assert len(client.get(f'/api/Product/farmer/{farmer.id}', headers=headers).json()) == 1
    assert client.get(f'/api/Product/farmer/{other_farmer.id}', headers=headers).json() == []


def test_product_reads_need_a_token(client, product):
    assert client.get('/api/Product/all').status_code == 401
    assert client.get(f'/api/Product/{product.id}').status_code == 401


def test_get_product_bad_id(client, employee, auth):
    resp = client.get('/api/Product/%20', headers=auth(employee))
    assert resp.status_code == 400
    assert resp.json()['detail'] == 'Product ID cannot be null or empty.'


def test_owner_updates_product(client, farmer, category, product, auth):
    payload = {**NEW_PRODUCT, 'name': 'Skim milk', 'category_id': category.id}
    resp = client.put(f'/api/Product/{product.id}', json=payload, headers=auth(farmer))
    assert resp.status_code == 200
    assert resp.json()['name'] == 'Skim milk'
    assert resp.json()['farmer_id'] == farmer.id


def test_other_farmer_cannot_touch_product(client, other_farmer, category, product, auth):
    payload = {**NEW_PRODUCT, 'category_id': category.id}
    assert client.put(f'/api/Product/{product.id}', json=payload, headers=auth(other_farmer)).status_code == 403
    assert client.delete(f'/api/Product/{product.id}', headers=auth(other_farmer)).status_code == 403


def test_employee_deletes_product(client, db, employee, product, auth):
    product_id = product.id
    resp = client.delete(f'/api/Product/{product_id}', headers=auth(employee))
    assert resp.status_code == 200
    db.expire_all()
    assert db.query(Product).filter(Product.id == product_id).count() == 0
    assert client.get(f'/api/Product/{product_id}', headers=auth(employee)).status_code == 404
