from agri_api.core.config import Settings
from agri_api.db.models import Category, Product, User
from agri_api.db.seed import seed_defaults
from agri_api.security.utils import verify_password


def test_seed_defaults_is_idempotent(db):
    cfg = Settings(SEED_DEMO_DATA=True)
    seed_defaults(db, cfg)
    seed_defaults(db, cfg)

    employee = db.query(User).filter(User.email == cfg.SEED_EMPLOYEE_EMAIL).one()
    assert employee.role == 'Employee'
    assert employee.full_name == 'John Doe'
    assert verify_password(cfg.SEED_EMPLOYEE_PASSWORD, employee.password_hash)
    assert db.query(User).filter(User.role == 'Farmer').count() == 1
    assert db.query(Category).count() == 4
    assert db.query(Product).count() == 1


def test_seed_without_demo_data_only_adds_employee(db):
    seed_defaults(db, Settings(SEED_DEMO_DATA=False))
    assert db.query(User).count() == 1
    assert db.query(Category).count() == 0


def test_health_and_info(client):
    assert client.get('/health').json() == {'status': 'ok'}
    assert client.get('/api/health').json() == {'status': 'ok'}
    assert client.get('/v1/_info').json()['service'] == 'agri-api'


def test_metrics_are_exposed(client):
    client.get('/api/health')
    resp = client.get('/api/metrics')
    assert resp.status_code == 200
    assert 'http_requests_total' in resp.text
