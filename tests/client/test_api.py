"""Tests for the CouchDB API wrappers."""

import json
from urllib.parse import parse_qsl, unquote

import pytest

from couch_tools.client.api import CouchDB
from couch_tools.client.exceptions import (
    CouchConfigError,
    CouchRequestError,
    CouchValidationError,
)
from couch_tools.client.gateway import Gateway


class TestDatabaseResolution:
    """Tests for database name defaulting and validation."""

    @pytest.mark.asyncio
    async def test_missing_database_raises_before_network(self, config, server, make_client):
        couch = make_client(config)

        with pytest.raises(CouchConfigError):
            await couch.get_database()

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_invalid_name_raises_before_network(self, config, server, make_client):
        couch = make_client(config)

        with pytest.raises(CouchValidationError, match="Invalid database name 'Test'"):
            await couch.create_database("Test")

        assert server.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["1orders", "_orders", "orders!", "or ders"])
    async def test_rejected_names(self, config, server, make_client, name):
        couch = make_client(config)

        with pytest.raises(CouchValidationError):
            await couch.get_database(name)

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_trailing_newline_raises_before_network(self, config, server, make_client):
        couch = make_client(config)

        with pytest.raises(CouchValidationError):
            await couch.create_database("orders\n")

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_default_database_is_used(self, db_config, server, make_client):
        server.add("GET", "/orders", body={"db_name": "orders", "doc_count": 2})
        couch = make_client(db_config)

        result = await couch.get_database()

        assert result["db_name"] == "orders"

    @pytest.mark.asyncio
    async def test_call_site_database_wins(self, db_config, server, make_client):
        server.add("GET", "/invoices", body={"db_name": "invoices"})
        couch = make_client(db_config)

        result = await couch.get_database("invoices")

        assert result["db_name"] == "invoices"

    @pytest.mark.asyncio
    async def test_database_name_is_escaped(self, config, server, make_client):
        server.add("PUT", "/shop%2Forders", status=201, body={"ok": True})
        couch = make_client(config)

        await couch.create_database("shop/orders")

        assert server.last.url.raw_path == b"/shop%2Forders"


class TestExistenceChecks:
    """Tests for the 404 -> False translation."""

    @pytest.mark.asyncio
    async def test_database_exists(self, config, server, make_client):
        server.add("HEAD", "/orders", status=200)
        couch = make_client(config)

        assert await couch.database_exists("orders") is True
        assert server.last.method == "HEAD"

    @pytest.mark.asyncio
    async def test_database_missing(self, config, server, make_client):
        server.add("HEAD", "/orders", status=404)
        couch = make_client(config)

        assert await couch.database_exists("orders") is False

    @pytest.mark.asyncio
    async def test_other_status_raises(self, config, server, make_client):
        server.add("HEAD", "/orders", status=500)
        couch = make_client(config)

        with pytest.raises(CouchRequestError) as exc_info:
            await couch.database_exists("orders")

        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_unauthorized_raises(self, config, server, make_client):
        server.add("HEAD", "/orders/secret", status=401)
        couch = make_client(config)

        with pytest.raises(CouchRequestError) as exc_info:
            await couch.document_exists("secret", database="orders")

        assert exc_info.value.status == 401
        assert exc_info.value.message == "Read privilege required"

    @pytest.mark.asyncio
    async def test_document_exists(self, db_config, server, make_client):
        server.add("HEAD", "/orders/order-1", status=200)
        couch = make_client(db_config)

        assert await couch.document_exists("order-1") is True
        assert await couch.document_exists("order-2") is False


class TestServerEndpoints:
    """Tests for server-level endpoints."""

    @pytest.mark.asyncio
    async def test_get_info(self, config, server, make_client):
        server.add("GET", "/", body={"couchdb": "Welcome", "version": "3.3.3"})
        couch = make_client(config)

        assert (await couch.get_info())["version"] == "3.3.3"

    @pytest.mark.asyncio
    async def test_list_databases(self, config, server, make_client):
        server.add("GET", "/_all_dbs", body=["_users", "orders"])
        couch = make_client(config)

        assert await couch.list_databases() == ["_users", "orders"]

    @pytest.mark.asyncio
    async def test_get_uuids(self, config, server, make_client):
        server.add("GET", "/_uuids?count=2", body={"uuids": ["a", "b"]})
        couch = make_client(config)

        assert (await couch.get_uuids(2))["uuids"] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_active_tasks_requires_admin(self, config, server, make_client):
        server.add("GET", "/_active_tasks", status=401, body={"error": "unauthorized"})
        couch = make_client(config)

        with pytest.raises(CouchRequestError) as exc_info:
            await couch.get_active_tasks()

        assert exc_info.value.message == "CouchDB Server Administrator privileges required"


class TestDatabaseEndpoints:
    """Tests for database lifecycle endpoints."""

    @pytest.mark.asyncio
    async def test_create_existing_database(self, config, server, make_client):
        server.add("PUT", "/orders", status=412, body={"error": "file_exists"})
        couch = make_client(config)

        with pytest.raises(CouchRequestError) as exc_info:
            await couch.create_database("orders")

        assert exc_info.value.status == 412
        assert str(exc_info.value) == "HTTP 412: Database already exists"

    @pytest.mark.asyncio
    async def test_delete_database(self, db_config, server, make_client):
        server.add("DELETE", "/orders", body={"ok": True})
        couch = make_client(db_config)

        assert await couch.delete_database() == {"ok": True}

    @pytest.mark.asyncio
    async def test_set_security(self, db_config, server, make_client):
        server.add("PUT", "/orders/_security", body={"ok": True})
        couch = make_client(db_config)

        await couch.set_security(admins={"names": ["alice"], "roles": []})

        assert json.loads(server.last.content) == {
            "admins": {"names": ["alice"], "roles": []},
            "members": {"names": [], "roles": []},
        }

    @pytest.mark.asyncio
    async def test_set_revision_limit(self, db_config, server, make_client):
        server.add("PUT", "/orders/_revs_limit", body={"ok": True})
        couch = make_client(db_config)

        await couch.set_revision_limit(100)

        assert server.last.content == b"100"

    @pytest.mark.asyncio
    async def test_compact_database(self, db_config, server, make_client):
        server.add("POST", "/orders/_compact", status=202, body={"ok": True})
        couch = make_client(db_config)

        assert await couch.compact_database() == {"ok": True}
        assert server.last.headers["content-type"] == "application/json"


class TestUserEndpoints:
    """Tests for _users endpoints."""

    @pytest.mark.asyncio
    async def test_create_user(self, config, server, make_client):
        server.add("PUT", "/_users/org.couchdb.user%3Aalice", status=201, body={"ok": True})
        couch = make_client(config)

        await couch.create_user("alice", "s3cret", roles=["reader"])

        assert unquote(server.last.url.path) == "/_users/org.couchdb.user:alice"
        assert json.loads(server.last.content) == {
            "_id": "org.couchdb.user:alice",
            "name": "alice",
            "password": "s3cret",
            "roles": ["reader"],
            "type": "user",
        }

    @pytest.mark.asyncio
    async def test_get_missing_user(self, config, server, make_client):
        couch = make_client(config)

        with pytest.raises(CouchRequestError) as exc_info:
            await couch.get_user("bob")

        assert exc_info.value.message == "User not found"

    @pytest.mark.asyncio
    async def test_delete_user(self, config, server, make_client):
        couch = make_client(config)

        with pytest.raises(CouchRequestError):
            await couch.delete_user("bob", "1-abc")

        assert server.last.method == "DELETE"
        assert server.last.url.params["rev"] == "1-abc"


class TestDocumentEndpoints:
    """Tests for document endpoints."""

    @pytest.mark.asyncio
    async def test_get_document(self, db_config, server, make_client):
        server.add("GET", "/orders/order-1", body={"_id": "order-1", "_rev": "1-a"})
        couch = make_client(db_config)

        assert (await couch.get_document("order-1"))["_rev"] == "1-a"

    @pytest.mark.asyncio
    async def test_document_id_is_escaped(self, db_config, server, make_client):
        couch = make_client(db_config)

        with pytest.raises(CouchRequestError):
            await couch.get_document("a/b c")

        assert server.last.url.raw_path == b"/orders/a%2Fb%20c"

    @pytest.mark.asyncio
    async def test_get_document_missing(self, db_config, server, make_client):
        couch = make_client(db_config)

        with pytest.raises(CouchRequestError) as exc_info:
            await couch.get_document("nope")

        assert exc_info.value.status == 404
        assert exc_info.value.message == "Document not found"

    @pytest.mark.asyncio
    async def test_get_document_with_query(self, db_config, server, make_client):
        couch = make_client(db_config)

        with pytest.raises(CouchRequestError):
            await couch.get_document("order-1", {"rev": "2-b", "conflicts": True})

        assert dict(server.last.url.params) == {"rev": "2-b", "conflicts": "true"}

    @pytest.mark.asyncio
    async def test_create_document_without_id_posts(self, db_config, server, make_client):
        server.add("POST", "/orders", status=201, body={"ok": True, "id": "gen", "rev": "1-a"})
        couch = make_client(db_config)

        result = await couch.create_document({"type": "order"})

        assert result["id"] == "gen"
        assert json.loads(server.last.content) == {"type": "order"}

    @pytest.mark.asyncio
    async def test_create_document_with_id_puts(self, db_config, server, make_client):
        server.add("PUT", "/orders/order-1", status=201, body={"ok": True, "id": "order-1", "rev": "1-a"})
        couch = make_client(db_config)

        result = await couch.create_document({"type": "order"}, doc_id="order-1")

        assert result["rev"] == "1-a"

    @pytest.mark.asyncio
    async def test_update_conflict(self, db_config, server, make_client):
        server.add("PUT", "/orders/order-1", status=409, body={"error": "conflict"})
        couch = make_client(db_config)

        with pytest.raises(CouchRequestError) as exc_info:
            await couch.create_document({"_rev": "1-old"}, doc_id="order-1")

        assert exc_info.value.status == 409

    @pytest.mark.asyncio
    async def test_delete_document(self, db_config, server, make_client):
        server.add("DELETE", "/orders/order-1?rev=1-a", body={"ok": True})
        couch = make_client(db_config)

        assert await couch.delete_document("order-1", "1-a") == {"ok": True}

    @pytest.mark.asyncio
    async def test_copy_document(self, db_config, server, make_client):
        server.add("COPY", "/orders/order-1", status=201, body={"ok": True, "id": "order-2"})
        couch = make_client(db_config)

        result = await couch.copy_document("order-1", "order-2")

        assert result["id"] == "order-2"
        assert server.last.method == "COPY"
        assert server.last.headers["destination"] == "order-2"

    @pytest.mark.asyncio
    async def test_copy_over_existing_revision(self, db_config, server, make_client):
        couch = make_client(db_config)

        with pytest.raises(CouchRequestError):
            await couch.copy_document("order-1", "order-2", destination_rev="3-c")

        assert server.last.headers["destination"] == "order-2?rev=3-c"

    @pytest.mark.asyncio
    async def test_copy_destination_is_escaped(self, db_config, server, make_client):
        """Test a "?" in the target id is not read as a revision suffix."""
        couch = make_client(db_config)

        with pytest.raises(CouchRequestError):
            await couch.copy_document("order-1", "x?rev=9-evil")

        assert server.last.headers["destination"] == "x%3Frev%3D9-evil"

    @pytest.mark.asyncio
    async def test_copy_non_ascii_destination(self, db_config, server, make_client):
        server.add("COPY", "/orders/order-1", status=201, body={"ok": True, "id": "caf\u00e9"})
        couch = make_client(db_config)

        result = await couch.copy_document("order-1", "caf\u00e9", destination_rev="2-b")

        assert result["id"] == "caf\u00e9"
        assert server.last.headers["destination"] == "caf%C3%A9?rev=2-b"

    @pytest.mark.asyncio
    async def test_copy_to_design_document(self, db_config, server, make_client):
        couch = make_client(db_config)

        with pytest.raises(CouchRequestError):
            await couch.copy_document("_design/reports", "_design/reports-v2")

        assert server.last.headers["destination"] == "_design/reports-v2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("source, destination", [("", "order-2"), ("order-1", ""), (None, None)])
    async def test_copy_requires_both_ids(self, db_config, server, make_client, source, destination):
        couch = make_client(db_config)

        with pytest.raises(CouchValidationError):
            await couch.copy_document(source, destination)

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_bulk_documents(self, db_config, server, make_client):
        server.add("POST", "/orders/_bulk_docs", status=201, body=[{"ok": True, "id": "a", "rev": "1-a"}])
        couch = make_client(db_config)

        result = await couch.bulk_documents([{"_id": "a"}], new_edits=False)

        assert result[0]["id"] == "a"
        assert json.loads(server.last.content) == {"docs": [{"_id": "a"}], "new_edits": False}

    @pytest.mark.asyncio
    async def test_find_documents(self, db_config, server, make_client):
        server.add("POST", "/orders/_find", body={"docs": [{"_id": "a"}]})
        couch = make_client(db_config)

        result = await couch.find_documents({"selector": {"type": "order"}, "limit": 5})

        assert result["docs"] == [{"_id": "a"}]
        assert json.loads(server.last.content)["selector"] == {"type": "order"}

    @pytest.mark.asyncio
    async def test_list_documents_keys_are_json(self, db_config, server, make_client):
        couch = make_client(db_config)

        with pytest.raises(CouchRequestError):
            await couch.list_documents({"keys": ["a", "b"], "include_docs": True})

        assert server.last.url.path == "/orders/_all_docs"
        params = dict(parse_qsl(server.last.url.query.decode()))
        assert json.loads(params["keys"]) == ["a", "b"]
        assert params["include_docs"] == "true"


class TestDesignEndpoints:
    """Tests for design documents, views and indexes."""

    @pytest.mark.asyncio
    async def test_design_prefix_is_kept(self, db_config, server, make_client):
        server.add("GET", "/orders/_design/reports", body={"_id": "_design/reports"})
        couch = make_client(db_config)

        result = await couch.get_design_document("reports")

        assert result["_id"] == "_design/reports"

    @pytest.mark.asyncio
    async def test_create_design_document(self, db_config, server, make_client):
        server.add("PUT", "/orders/_design/reports", status=201, body={"ok": True})
        couch = make_client(db_config)

        views = {"views": {"by_type": {"map": "function(doc) { emit(doc.type, 1); }"}}}
        await couch.create_design_document("reports", views)

        assert json.loads(server.last.content) == views

    @pytest.mark.asyncio
    async def test_delete_design_document(self, db_config, server, make_client):
        server.add("DELETE", "/orders/_design/reports?rev=1-a", body={"ok": True})
        couch = make_client(db_config)

        assert await couch.delete_design_document("reports", "1-a") == {"ok": True}

    @pytest.mark.asyncio
    async def test_get_view(self, db_config, server, make_client):
        couch = make_client(db_config)

        with pytest.raises(CouchRequestError) as exc_info:
            await couch.get_view("reports", "by_type", {"key": "order", "reduce": False})

        assert exc_info.value.message == "Specified database, design document or view is missed"
        assert server.last.url.path == "/orders/_design/reports/_view/by_type"
        params = dict(parse_qsl(server.last.url.query.decode()))
        assert params == {"key": '"order"', "reduce": "false"}

    @pytest.mark.asyncio
    async def test_create_index(self, db_config, server, make_client):
        server.add("POST", "/orders/_index", body={"result": "created", "id": "_design/idx", "name": "by-type"})
        couch = make_client(db_config)

        result = await couch.create_index({"fields": ["type"]}, name="by-type", ddoc="idx")

        assert result["result"] == "created"
        assert json.loads(server.last.content) == {
            "index": {"fields": ["type"]},
            "name": "by-type",
            "ddoc": "idx",
        }

    @pytest.mark.asyncio
    async def test_get_indexes(self, db_config, server, make_client):
        server.add("GET", "/orders/_index", body={"total_rows": 1, "indexes": []})
        couch = make_client(db_config)

        assert (await couch.get_indexes())["total_rows"] == 1

    @pytest.mark.asyncio
    async def test_delete_index(self, db_config, server, make_client):
        server.add("DELETE", "/orders/_index/idx/json/by-type", body={"ok": True})
        couch = make_client(db_config)

        assert await couch.delete_index("idx", "by-type") == {"ok": True}


class TestClientLifecycle:
    """Tests for CouchDB construction and cleanup."""

    @pytest.mark.asyncio
    async def test_async_context_manager(self, config, server):
        gateway = Gateway(config, transport=server.transport())

        async with CouchDB(gateway=gateway) as couch:
            assert couch.config is config
            await couch.list_databases()

        assert gateway._client is None
