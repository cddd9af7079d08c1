import uuid


def test_list_categories_is_public_and_counts_products(client, category, product):
    resp = client.get('/api/categories/all')
    assert resp.status_code == 200
    assert resp.json() == [{'id': category.id, 'name': 'Dairy', 'number_of_products': 1}]


def test_create_category(client, farmer, auth):
    resp = client.post('/api/categories', json={'name': '  Solar Panels '}, headers=auth(farmer))
    assert resp.status_code == 200
    body = resp.json()
    assert body['name'] == 'Solar Panels'
    assert body['number_of_products'] == 0

    fetched = client.get(f'/api/categories/{body["id"]}', headers=auth(farmer))
    assert fetched.status_code == 200
    assert fetched.json()['name'] == 'Solar Panels'


def test_create_category_requires_login(client):
    assert client.post('/api/categories', json={'name': 'Grains'}).status_code == 401


def test_create_duplicate_category_ignores_case(client, employee, category, auth):
    resp = client.post('/api/categories', json={'name': 'dairy'}, headers=auth(employee))
    assert resp.status_code == 400
    assert 'already exists' in resp.json()['detail']


def test_duplicate_category_with_accented_letters(client, employee, auth):
    first = client.post('/api/categories', json={'name': 'Élevage'}, headers=auth(employee))
    assert first.status_code == 200
    second = client.post('/api/categories', json={'name': 'élevage'}, headers=auth(employee))
    assert second.status_code == 400
    assert [c['name'] for c in client.get('/api/categories/all').json()] == ['Élevage']


def test_create_blank_category(client, employee, auth):
    resp = client.post('/api/categories', json={'name': '   '}, headers=auth(employee))
    assert resp.status_code == 400
    assert 'name' in resp.json()


def test_get_category(client, employee, category, auth):
    resp = client.get(f'/api/categories/{category.id}', headers=auth(employee))
    assert resp.status_code == 200
    assert resp.json()['name'] == 'Dairy'

    missing = client.get(f'/api/categories/{uuid.uuid4()}', headers=auth(employee))
    assert missing.status_code == 404


def test_delete_empty_category(client, employee, category, auth):
    resp = client.delete(f'/api/categories/{category.id}', headers=auth(employee))
    assert resp.status_code == 200
    assert client.get('/api/categories/all').json() == []


def test_delete_category_with_products_is_refused(client, employee, category, product, auth):
    resp = client.delete(f'/api/categories/{category.id}', headers=auth(employee))
    assert resp.status_code == 400
    assert resp.json()['detail'] == 'Category Dairy still has 1 products and cannot be deleted.'
    assert client.get(f'/api/Product/{product.id}', headers=auth(employee)).status_code == 200


def test_delete_category_is_employee_only(client, farmer, category, auth):
    resp = client.delete(f'/api/categories/{category.id}', headers=auth(farmer))
    assert resp.status_code == 403
