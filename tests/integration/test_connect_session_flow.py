"""
Integration tests for issuing connect sessions through the HTTP handler.

Runs against the globally initialized database manager with tenant scope
resolved from gateway headers, the way the function app wires it.
"""

import json
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlsplit

import azure.functions as func
import pytest
from sqlalchemy.orm import Session

from connect_session_core.api import post_connect_sessions, tenant_from_headers
from connect_session_core.constants import EntityType
from connect_session_core.db import ConnectSession, PrivateKey
from connect_session_core.utils.keystore_utils import get_private_key
from tests.fixtures.factories import IntegrationFactory

TENANT_HEADERS = {"x-account-id": "acc_test_1", "x-environment-id": "env_test_1"}


def _post(body) -> func.HttpResponse:
    req = func.HttpRequest(
        method="POST",
        url="/api/connect/sessions",
        body=json.dumps(body).encode(),
        headers=dict(TENANT_HEADERS, **{"Content-Type": "application/json"}),
    )
    return post_connect_sessions(req, tenant_from_headers(req))


@pytest.fixture
def tenant_integrations(db_session: Session):
    IntegrationFactory.create(unique_key="gh")
    IntegrationFactory.create(unique_key="slack")


class TestConnectSessionFlow:
    def test_session_issued_for_known_integration(self, tenant_integrations, db_session):
        before = datetime.now(timezone.utc)

        response = _post({"end_user": {"email": "a@b.com"}, "allowed_integrations": ["gh"]})

        assert response.status_code == 201
        data = json.loads(response.get_body())["data"]

        link = urlsplit(data["connect_link"])
        assert f"{link.scheme}://{link.netloc}" == "http://localhost:3009"
        assert parse_qs(link.query)["session_token"] == [data["token"]]

        expires_at = datetime.fromisoformat(data["expires_at"].replace("Z", "+00:00"))
        assert timedelta(minutes=29) < expires_at - before <= timedelta(minutes=31)

        private_key = get_private_key(db_session, data["token"], EntityType.CONNECT_SESSION)
        connect_session = db_session.get(ConnectSession, private_key.entity_id)
        assert connect_session.allowed_integrations == ["gh"]
        assert connect_session.end_user["email"] == "a@b.com"

    def test_unknown_integration_rejected(self, tenant_integrations, db_session):
        response = _post({"allowed_integrations": ["nope"]})

        assert response.status_code == 400
        error = json.loads(response.get_body())["error"]
        assert error["code"] == "invalid_body"
        assert [e["path"] for e in error["errors"]] == [["allowed_integrations", 0]]
        assert db_session.query(ConnectSession).count() == 0
        assert db_session.query(PrivateKey).count() == 0
