"""
Unit tests for tenant context management.
"""

import threading

import pytest

from connect_session_core.context.tenant_context import (
    TenantContext,
    tenant_aware,
    tenant_context,
)
from connect_session_core.exceptions import ValidationError
from connect_session_core.schemas import TenantScope


@pytest.fixture
def other_tenant() -> TenantScope:
    return TenantScope(account_id="acc_other", environment_id="env_other")


class TestTenantContext:
    """Test TenantContext class methods."""

    def test_set_and_get(self, tenant):
        TenantContext.set_current_tenant(tenant)

        assert TenantContext.get_current_tenant() == tenant
        assert TenantContext.get_current_environment_id() == tenant.environment_id

    def test_clear(self, tenant):
        TenantContext.set_current_tenant(tenant)
        TenantContext.clear_current_tenant()

        assert TenantContext.get_current_tenant() is None
        assert TenantContext.get_current_environment_id() is None

    def test_rejects_non_scope(self):
        with pytest.raises(ValidationError):
            TenantContext.set_current_tenant("acc_1")

    def test_thread_isolation(self, tenant):
        TenantContext.set_current_tenant(tenant)
        seen = []

        thread = threading.Thread(target=lambda: seen.append(TenantContext.get_current_tenant()))
        thread.start()
        thread.join()

        assert seen == [None]


class TestTenantContextManager:
    """Test the tenant_context context manager."""

    def test_sets_and_clears(self, tenant):
        with tenant_context(tenant) as scope:
            assert scope == tenant
            assert TenantContext.get_current_tenant() == tenant

        assert TenantContext.get_current_tenant() is None

    def test_nested_restores_previous(self, tenant, other_tenant):
        with tenant_context(tenant):
            with tenant_context(other_tenant):
                assert TenantContext.get_current_tenant() == other_tenant
            assert TenantContext.get_current_tenant() == tenant

    def test_cleared_on_exception(self, tenant):
        with pytest.raises(RuntimeError):
            with tenant_context(tenant):
                raise RuntimeError("boom")

        assert TenantContext.get_current_tenant() is None


class TestTenantAware:
    """Test the tenant_aware decorator."""

    def test_uses_decorator_tenant(self, tenant):
        @tenant_aware(tenant)
        def current():
            return TenantContext.get_current_tenant()

        assert current() == tenant
        assert TenantContext.get_current_tenant() is None

    def test_uses_context_tenant(self, tenant):
        @tenant_aware
        def current():
            return TenantContext.get_current_tenant()

        with tenant_context(tenant):
            assert current() == tenant

    def test_requires_a_tenant(self):
        @tenant_aware()
        def current():
            return None

        with pytest.raises(ValidationError):
            current()
