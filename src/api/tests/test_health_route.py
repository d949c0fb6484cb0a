"""Tests for the health and root endpoints."""

import unittest
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient

from api.main import app, SERVICE_NAME
from api.dependencies import get_settings
from utils.config import Settings


class TestHealth(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)
        app.dependency_overrides[get_settings] = lambda: Settings()

    def tearDown(self):
        app.dependency_overrides.clear()

    @patch('api.routes.health.get_mongodb_client')
    def test_healthy(self, mock_get_client):
        mock_get_client.return_value = MagicMock()
        response = self.client.get('/health')
        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'
        assert response.json()['services']['mongodb']['status'] == 'healthy'

    @patch('api.routes.health.get_mongodb_client')
    def test_degraded_without_mongodb(self, mock_get_client):
        mock_get_client.return_value = None
        response = self.client.get('/health')
        assert response.status_code == 503
        assert response.json()['status'] == 'degraded'

    def test_root(self):
        response = self.client.get('/')
        assert response.status_code == 200
        assert response.json()['service'] == SERVICE_NAME
        assert response.json()['status'] == 'running'


if __name__ == '__main__':
    unittest.main()
