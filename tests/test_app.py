"""
Tests for the application factory, main routes and error handling.

Tests cover:
- Dashboard metrics and low stock list
- Reloading the snapshot from the database
- Health check (online/offline)
- CSRF token endpoint and JSON CSRF errors
- JSON error responses and security headers
- Error logger
"""

import pytest
from unittest.mock import patch

from shopdesk import create_app
from shopdesk.models import db, ErrorLog, Inventory
from shopdesk.store import TableStore
from shopdesk.utils.error_logger import log_error


class TestDashboard:
    """Tests for GET /."""

    def test_metrics(self, client, init_database):
        data = client.get('/').get_json()
        assert data['success'] is True
        assert data['currencySymbol'] == 'GH₵'
        assert data['metrics'] == {
            'totalRevenue': 160.0,
            'totalProfit': 38.0,
            'lowStockCount': 2,
            'totalInventoryValue': 2209.0,
        }
        assert sorted(i['id'] for i in data['lowStock']) == ['item-soap', 'item-water']

    def test_empty_shop(self, client):
        metrics = client.get('/').get_json()['metrics']
        assert metrics['totalRevenue'] == 0.0
        assert metrics['lowStockCount'] == 0

    def test_load_failure_returns_json_error(self, client):
        from shopdesk.exceptions import StoreError
        with patch.object(TableStore, 'select', side_effect=StoreError('inventory', 'select')):
            response = client.get('/')
        assert response.status_code == 500
        assert response.get_json()['success'] is False


class TestRefresh:
    """Tests for reloading the snapshot from the database."""

    def _insert_directly(self, db_session):
        db_session.add(Inventory(id='item-direct', name='Sugar', category='Groceries', quantity=8))
        db_session.commit()

    def test_refresh_picks_up_outside_writes(self, client, db_session, init_database):
        assert client.get('/inventory/').get_json()['count'] == 3
        self._insert_directly(db_session)
        assert client.get('/inventory/').get_json()['count'] == 3

        response = client.post('/refresh')
        assert response.status_code == 200
        assert response.get_json() == {'success': True, 'inventory': 4, 'sales': 2, 'expenses': 2}
        assert client.get('/inventory/').get_json()['count'] == 4

    def test_stale_snapshot_reloads_on_read(self, client, fresh_app, db_session, init_database):
        fresh_app.config['SNAPSHOT_MAX_AGE'] = 0
        assert client.get('/inventory/').get_json()['count'] == 3
        self._insert_directly(db_session)
        assert client.get('/inventory/').get_json()['count'] == 4


class TestHealth:
    """Tests for GET /health."""

    def test_online(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json() == {'success': True, 'status': 'online'}

    def test_offline(self, client):
        with patch.object(TableStore, 'ping', return_value=False):
            response = client.get('/health')
        assert response.status_code == 503
        assert response.get_json()['status'] == 'offline'


class TestSecurity:
    """Tests for CSRF and response headers."""

    def test_csrf_token(self, client):
        data = client.get('/csrf-token').get_json()
        assert data['csrfToken']

    def test_missing_csrf_token_returns_json(self, app_factory):
        app = app_factory()
        app.config['WTF_CSRF_ENABLED'] = True
        response = app.test_client().post('/expenses/', json={'description': 'x'})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'CSRF token missing or invalid'

    def test_security_headers(self, client):
        response = client.get('/health')
        assert response.headers['X-Frame-Options'] == 'DENY'
        assert response.headers['X-Content-Type-Options'] == 'nosniff'

    def test_unknown_route_is_json(self, client):
        response = client.get('/does-not-exist')
        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'error': 'Not found'}

    def test_method_not_allowed_is_json(self, client):
        response = client.delete('/financial-reports/')
        assert response.status_code == 405
        assert response.get_json()['success'] is False


class TestConfig:
    """Tests for configuration loading."""

    def test_production_requires_secret_key(self, monkeypatch):
        from config import ProductionConfig
        monkeypatch.setattr(ProductionConfig, 'SECRET_KEY', 'dev-secret-key-change-in-production')
        with pytest.raises(ValueError, match='secure SECRET_KEY'):
            create_app('production')

    def test_production_rejects_short_secret_key(self, monkeypatch):
        from config import ProductionConfig
        monkeypatch.setattr(ProductionConfig, 'SECRET_KEY', 'short')
        with pytest.raises(ValueError, match='at least 32 characters'):
            create_app('production')


class TestErrorLogger:
    """Tests for log_error."""

    def test_records_error(self, fresh_app):
        with fresh_app.test_request_context('/pos/checkout', method='POST'):
            entry = log_error(ValueError('boom'), status_code=500)

        assert entry is not None
        row = db.session.get(ErrorLog, entry.id)
        assert row.error_type == 'ValueError'
        assert row.error_message == 'boom'
        assert row.request_method == 'POST'
        assert row.status_code == 500
        assert row.is_resolved is False

    def test_redacts_sensitive_request_data(self, fresh_app):
        with fresh_app.test_request_context(
            '/insights/', method='POST', json={'api_key': 'secret-value', 'note': 'hello'}
        ):
            entry = log_error(RuntimeError('failed'))

        assert 'secret-value' not in entry.request_data
        assert '[REDACTED]' in entry.request_data
        assert 'hello' in entry.request_data

    def test_never_raises(self, fresh_app):
        with patch.object(db.session, 'commit', side_effect=RuntimeError('db down')):
            assert log_error(ValueError('boom')) is None
