"""
Tests for configuration classes and the application factory.
"""
import json
import logging

import pytest

from assetdesk import JSONFormatter
from assetdesk.config import config, Config, ProductionConfig, TestingConfig


class TestConfig:

    def test_testing_config(self, app):
        assert app.config['TESTING'] is True
        assert app.config['SQLALCHEMY_DATABASE_URI'] == 'sqlite:///:memory:'
        assert app.config['RATELIMIT_ENABLED'] is False
        assert app.config['CACHE_TYPE'] == 'NullCache'

    def test_lockout_defaults(self, app):
        assert app.config['MAX_LOGIN_ATTEMPTS'] == 5
        assert app.config['LOCKOUT_DURATION_MINUTES'] == 30

    def test_no_cookie_session_settings(self):
        assert 'PERMANENT_SESSION_LIFETIME' not in vars(Config)

    def test_config_registry(self):
        assert config['testing'] is TestingConfig
        assert config['default'] is config['development']

    def test_production_requires_secret_key(self, monkeypatch):
        monkeypatch.setattr(ProductionConfig, 'SECRET_KEY', None)
        with pytest.raises(ValueError, match='SECRET_KEY'):
            ProductionConfig.init_app(None)

    def test_production_requires_database_url(self, monkeypatch):
        monkeypatch.setattr(ProductionConfig, 'SECRET_KEY', 'prod-secret')
        monkeypatch.setattr(ProductionConfig, 'SQLALCHEMY_DATABASE_URI', None)
        with pytest.raises(ValueError, match='DATABASE_URL'):
            ProductionConfig.init_app(None)

    def test_api_blueprint_registered(self, app):
        rules = {rule.rule for rule in app.url_map.iter_rules()}
        assert '/api/v1/gigs' in rules
        assert '/api/v1/auth/login' in rules
        assert '/api/v1/reports' in rules


class TestJSONFormatter:

    def test_formats_record_as_json(self):
        record = logging.LogRecord('assetdesk', logging.INFO, __file__, 10, 'booked %s', ('gig',), None)
        entry = json.loads(JSONFormatter().format(record))

        assert entry['level'] == 'INFO'
        assert entry['message'] == 'booked gig'
        assert 'request_id' not in entry
