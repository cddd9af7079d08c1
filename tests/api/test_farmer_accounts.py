import uuid

from agri_api.db.models import Product, User

UPDATE = {
    'email_address': 'jane.new@farm.co.za',
    'full_name': 'Jane M. Mokoena',
    'address': '8 Riverside Farm Rd',
    'phone_number': '+27 82 555 0199',
}


def test_list_farmers_excludes_employees(client, employee, farmer, other_farmer, auth):
    resp = client.get('/api/FarmerAccount/farmer/all', headers=auth(employee))
    assert resp.status_code == 200
    emails = [f['email'] for f in resp.json()]
    assert emails == ['farmer@agrienergy.com', 'sipho@agrienergy.com']


def test_list_farmers_empty(client, employee, auth):
    resp = client.get('/api/FarmerAccount/farmer/all', headers=auth(employee))
    assert resp.status_code == 200
    assert resp.json() == []


def test_farmer_accounts_are_employee_only(client, farmer, auth):
    assert client.get('/api/FarmerAccount/farmer/all').status_code == 401
    assert client.get('/api/FarmerAccount/farmer/all', headers=auth(farmer)).status_code == 403


def test_get_farmer(client, employee, farmer, auth):
    resp = client.get(f'/api/FarmerAccount/farmer/{farmer.id}', headers=auth(employee))
    assert resp.status_code == 200
    body = resp.json()
    assert body['full_name'] == 'Jane Mokoena'
    assert 'password_hash' not in body


def test_get_farmer_bad_ids(client, employee, auth):
    resp = client.get('/api/FarmerAccount/farmer/not-a-uuid', headers=auth(employee))
    assert resp.status_code == 400
    assert resp.json()['detail'] == 'Farmer ID is not valid.'

    resp = client.get(f'/api/FarmerAccount/farmer/{uuid.uuid4()}', headers=auth(employee))
    assert resp.status_code == 404


def test_employee_id_is_not_a_farmer(client, employee, auth):
    resp = client.get(f'/api/FarmerAccount/farmer/{employee.id}', headers=auth(employee))
    assert resp.status_code == 404


def test_update_farmer(client, db, employee, farmer, auth):
    resp = client.put(f'/api/FarmerAccount/farmer/{farmer.id}', json=UPDATE, headers=auth(employee))
    assert resp.status_code == 200
    assert resp.json()['email'] == 'jane.new@farm.co.za'
    db.expire_all()
    assert db.get(User, farmer.id).address == '8 Riverside Farm Rd'


def test_update_farmer_to_taken_email(client, employee, farmer, other_farmer, auth):
    payload = {**UPDATE, 'email_address': other_farmer.email}
    resp = client.put(f'/api/FarmerAccount/farmer/{farmer.id}', json=payload, headers=auth(employee))
    assert resp.status_code == 400


def test_update_farmer_validation(client, employee, farmer, auth):
    payload = {**UPDATE, 'full_name': ''}
    resp = client.put(f'/api/FarmerAccount/farmer/{farmer.id}', json=payload, headers=auth(employee))
    assert resp.status_code == 400
    assert 'full_name' in resp.json()


def test_delete_farmer_takes_their_products(client, db, employee, farmer, other_farmer, product, auth):
    farmer_id, product_id = farmer.id, product.id
    resp = client.delete(f'/api/FarmerAccount/farmer/{farmer_id}', headers=auth(employee))
    assert resp.status_code == 200
    db.expire_all()
    assert db.query(User).filter(User.id == farmer_id).count() == 0
    assert db.query(Product).filter(Product.id == product_id).count() == 0
    assert db.query(Product).count() == 0
    assert db.query(User).filter(User.id == other_farmer.id).count() == 1
