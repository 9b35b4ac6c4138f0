"""Tests for the API views, wired through the container."""

import pytest
import pytest_asyncio
from conftest import TEST_SECRET, make_request

from app.container import container
from app.models.common import new_id
from web.api import auth as auth_api
from web.api import cache as cache_api
from web.api import dashboard as dashboard_api
from web.api import entities as entities_api
from web.api import health as health_api
from web.api.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    ValidationError,
    to_response,
)


@pytest_asyncio.fixture
async def app():
    container.reset()
    container.init(db_path=":memory:", jwt_secret=TEST_SECRET)
    await container.db.connect()
    yield container
    container.reset()


async def _session(email: str, role: str):
    await container.auth.register_user(email, email.split("@")[0].title(), "correct horse", role)
    response = await auth_api.login(email, "correct horse")
    return make_request(response.cookie.value)


@pytest_asyncio.fixture
async def admin(app):
    return await _session("admin@example.com", "admin")


@pytest_asyncio.fixture
async def designer(app):
    return await _session("ana@example.com", "designer")


class TestAuthViews:
    @pytest.mark.asyncio
    async def test_login_sets_cookie(self, app):
        await container.auth.register_user("ana@example.com", "Ana", "correct horse")
        response = await auth_api.login("ana@example.com", "correct horse")
        assert response.cookie.name == "token"
        assert response.cookie.http_only
        assert response.cookie.max_age == 24 * 3600
        assert "password" not in response.user

    @pytest.mark.asyncio
    async def test_login_rejects_bad_credentials(self, app):
        with pytest.raises(UnauthorizedError):
            await auth_api.login("nobody@example.com", "correct horse")
        with pytest.raises(ValidationError):
            await auth_api.login("", "")

    @pytest.mark.asyncio
    async def test_logout_clears_cookie(self, app):
        response = await auth_api.logout()
        assert response.cookie.value == ""
        assert response.cookie.max_age == 0

    @pytest.mark.asyncio
    async def test_check(self, designer):
        assert (await auth_api.check(designer)).status == "authenticated"
        assert (await auth_api.check(make_request())).status == "unauthenticated"

    @pytest.mark.asyncio
    async def test_require_user_is_uniform(self, app):
        for request in (make_request(), make_request("garbage")):
            with pytest.raises(UnauthorizedError) as exc:
                await auth_api.require_user(request)
            assert to_response(exc.value) == (401, {"message": "Not authenticated"})

    @pytest.mark.asyncio
    async def test_require_user_connection_error(self, designer):
        def unavailable(path):
            raise OSError("disk unavailable")

        container.db.close()
        container.db._connect_fn = unavailable
        with pytest.raises(ServerError):
            await auth_api.require_user(designer)


class TestCacheView:
    @pytest.mark.asyncio
    async def test_admin_only(self, designer):
        with pytest.raises(ForbiddenError):
            await cache_api.clear_cache(designer)

    @pytest.mark.asyncio
    async def test_clears(self, admin):
        await container.cache.get_cached_data("project", lambda: ["cached"])
        response = await cache_api.clear_cache(admin)
        assert response.message == "Cache cleared successfully"
        assert container.cache.store.count() == 0

    @pytest.mark.asyncio
    async def test_requires_session(self, app):
        with pytest.raises(UnauthorizedError):
            await cache_api.clear_cache(make_request())


class TestEntityViews:
    @pytest.mark.asyncio
    async def test_crud(self, designer):
        created = (await entities_api.create_document(designer, "project", {"name": "Website"})).item
        doc_id = created["id"]

        listed = await entities_api.list_documents(designer, "project")
        assert listed.total == 1

        await entities_api.update_document(designer, "project", doc_id, {"status": "completed"})
        assert (await entities_api.get_document(designer, "project", doc_id)).item["status"] == "completed"

        await entities_api.delete_document(designer, "project", doc_id)
        with pytest.raises(NotFoundError):
            await entities_api.get_document(designer, "project", doc_id)
        assert (await entities_api.list_documents(designer, "project")).total == 0

    @pytest.mark.asyncio
    async def test_hit_and_miss_have_same_shape(self, designer):
        created = (await entities_api.create_document(designer, "task", {"title": "QA"})).item
        miss = await entities_api.get_document(designer, "task", created["id"])
        hit = await entities_api.get_document(designer, "task", created["id"])
        assert miss.item == hit.item
        assert isinstance(hit.item["created_at"], str)

    @pytest.mark.asyncio
    async def test_list_is_cached(self, designer):
        await entities_api.list_documents(designer, "client")
        assert container.cache.store.get("client") is not None

    @pytest.mark.asyncio
    async def test_unknown_entity_and_bad_id(self, designer):
        with pytest.raises(NotFoundError):
            await entities_api.list_documents(designer, "spaceship")
        with pytest.raises(ValidationError):
            await entities_api.get_document(designer, "project", "1")
        with pytest.raises(NotFoundError):
            await entities_api.delete_document(designer, "project", new_id())

    @pytest.mark.asyncio
    async def test_requires_session(self, app):
        with pytest.raises(UnauthorizedError):
            await entities_api.list_documents(make_request(), "project")

    @pytest.mark.asyncio
    async def test_users_managed_by_admins(self, admin, designer):
        payload = {"email": "bob@example.com", "name": "Bob", "password": "correct horse"}
        with pytest.raises(ForbiddenError):
            await entities_api.create_document(designer, "user", payload)

        created = (await entities_api.create_document(admin, "user", payload)).item
        assert "password" not in created

        listed = await entities_api.list_documents(designer, "user")
        assert all("password" not in u for u in listed.items)

        with pytest.raises(ValidationError):
            await entities_api.create_document(admin, "user", payload)

    @pytest.mark.asyncio
    async def test_user_password_update_is_hashed(self, admin):
        payload = {"email": "bob@example.com", "name": "Bob", "password": "correct horse"}
        created = (await entities_api.create_document(admin, "user", payload)).item

        updated = await entities_api.update_document(admin, "user", created["id"], {"password": "battery staple"})
        assert "password" not in updated.item
        assert await container.auth.login("bob@example.com", "battery staple") is not None


class TestDashboardView:
    @pytest.mark.asyncio
    async def test_overview(self, designer):
        await entities_api.create_document(designer, "project", {"name": "Website", "status": "in-progress"})
        overview = await dashboard_api.get_overview(designer)
        assert overview.projects.total == 1
        assert overview.projects.active == 1
        assert overview.team.total == 1

    @pytest.mark.asyncio
    async def test_requires_session(self, app):
        with pytest.raises(UnauthorizedError):
            await dashboard_api.get_overview(make_request())


class TestHealth:
    def test_ok(self):
        assert health_api.health().status == "ok"


class TestEntityRoles:
    @pytest_asyncio.fixture
    async def manager(self, app):
        return await _session("max@example.com", "manager")

    @pytest.mark.asyncio
    async def test_expenses_hidden_from_other_roles(self, designer):
        with pytest.raises(ForbiddenError) as exc:
            await entities_api.list_documents(designer, "expense")
        assert to_response(exc.value)[0] == 403
        with pytest.raises(ForbiddenError):
            await entities_api.create_document(designer, "expense", {"amount": 120})

    @pytest.mark.asyncio
    async def test_manager_records_but_cannot_change_expenses(self, manager):
        created = (await entities_api.create_document(manager, "expense", {"amount": 120})).item
        assert (await entities_api.list_documents(manager, "expense")).total == 1

        with pytest.raises(ForbiddenError):
            await entities_api.update_document(manager, "expense", created["id"], {"amount": 90})
        with pytest.raises(ForbiddenError):
            await entities_api.delete_document(manager, "expense", created["id"])

    @pytest.mark.asyncio
    async def test_admin_manages_expenses(self, admin):
        created = (await entities_api.create_document(admin, "expense", {"amount": 120})).item
        updated = await entities_api.update_document(admin, "expense", created["id"], {"amount": 90})
        assert updated.item["amount"] == 90
        await entities_api.delete_document(admin, "expense", created["id"])

    def test_role_table(self):
        assert entities_api.allowed_roles("expense", "delete") == ("admin", "finance")
        assert entities_api.allowed_roles("project", "delete") is None


class TestDuplicateCreate:
    @pytest.mark.asyncio
    async def test_existing_id_is_a_conflict(self, designer):
        doc_id = new_id()
        await entities_api.create_document(designer, "project", {"id": doc_id, "name": "Website"})

        with pytest.raises(ConflictError) as exc:
            await entities_api.create_document(designer, "project", {"id": doc_id, "name": "Copy"})
        assert to_response(exc.value)[0] == 409
        assert (await entities_api.get_document(designer, "project", doc_id)).item["name"] == "Website"
