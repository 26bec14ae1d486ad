"""High-level async API for CouchDB operations.

Each method describes one request to the CouchDB HTTP API and hands it to
the Gateway. Database names fall back to the configured default database;
names and document ids are escaped here, before the path reaches the
gateway.
"""

from collections.abc import Mapping
from typing import Any

from .config import CouchConfig
from .exceptions import CouchRequestError, CouchValidationError
from .gateway import Gateway
from .paths import database_path, document_segment, resolve_database
from .query import build_query_string
from .request import Method, RequestDescriptor

ADMIN_REQUIRED = "CouchDB Server Administrator privileges required"
COMPLETED = "Request completed successfully"

DOCUMENT_READ_MESSAGES = {
    200: COMPLETED,
    304: "Document wasn't modified since specified revision",
    400: "The format of the request or revision was invalid",
    401: "Read privilege required",
    404: "Document not found",
}

DOCUMENT_WRITE_MESSAGES = {
    201: "Document created and stored on disk",
    202: "Document data accepted, but not yet stored on disk",
    400: "Invalid request body or parameters",
    401: "Write privileges required",
    404: "Specified database or document ID doesn't exists",
    409: "Document with the specified ID already exists or specified revision is not latest for target document",
}

DOCUMENT_DELETE_MESSAGES = {
    200: "Document successfully removed",
    202: "Request was accepted, but changes are not yet stored on disk",
    400: "Invalid request body or parameters",
    401: "Write privileges required",
    404: "Specified database or document ID doesn't exists",
    409: "Specified revision is not the latest for target document",
}

QUERY_MESSAGES = {
    200: COMPLETED,
    400: "Invalid request",
    401: "Read permission required",
    404: "Specified database, design document or view is missed",
    500: "Query execution error",
}


class CouchDB:
    """Async client for a CouchDB server.

    Usage:
        # Auto-configure from environment (COUCHDB_*)
        async with CouchDB() as couch:
            info = await couch.get_info()

        # Explicit configuration with a default database
        config = CouchConfig(host="http://db.local", port=5984, default_database="orders")
        couch = CouchDB(config)
        doc = await couch.get_document("order-1")
        await couch.aclose()

        # Inject a custom gateway (for testing)
        couch = CouchDB(gateway=Gateway(config, transport=httpx.MockTransport(handler)))
    """

    def __init__(
        self,
        config: CouchConfig | None = None,
        gateway: Gateway | None = None,
    ):
        """Initialize the client.

        Args:
            config: Configuration (loads from environment if None)
            gateway: Optional pre-configured gateway. When given, its
                configuration is used.
        """
        self._gateway = gateway or Gateway(config)
        self.config = self._gateway.config

    async def __aenter__(self) -> "CouchDB":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    async def aclose(self) -> None:
        """Close the client and release resources."""
        await self._gateway.aclose()

    def _database(self, database: str | None) -> str:
        return resolve_database(database, self.config.default_database)

    async def _exists(self, path: str, messages: Mapping[int, str]) -> bool:
        """HEAD a resource: 404 means False, any other failure is raised."""
        outcome = await self._gateway.dispatch(RequestDescriptor(
            path=path,
            method=Method.HEAD,
            status_messages=messages,
        ))
        if outcome.ok:
            return True
        if outcome.status == 404:
            return False
        raise CouchRequestError(outcome.error)

    # Server

    async def get_info(self) -> dict[str, Any]:
        """Get server meta information (version, vendor, uuid)."""
        return await self._gateway.request(RequestDescriptor(
            status_messages={200: COMPLETED},
        ))

    async def list_databases(self) -> list[str]:
        """List the names of all databases on the server."""
        return await self._gateway.request(RequestDescriptor(
            path="_all_dbs",
            status_messages={200: COMPLETED},
        ))

    async def get_uuids(self, count: int = 1) -> dict[str, Any]:
        """Request server-generated UUIDs.

        Args:
            count: Number of UUIDs to generate

        Returns:
            Dictionary with a 'uuids' list
        """
        return await self._gateway.request(RequestDescriptor(
            path=f"_uuids{build_query_string({'count': count})}",
            status_messages={
                200: COMPLETED,
                400: "Requested more UUIDs than is allowed to retrieve",
            },
        ))

    async def get_active_tasks(self) -> list[dict[str, Any]]:
        """List running tasks (compactions, replications, indexers)."""
        return await self._gateway.request(RequestDescriptor(
            path="_active_tasks",
            status_messages={200: COMPLETED, 401: ADMIN_REQUIRED},
        ))

    # Databases

    async def create_database(self, database: str | None = None) -> dict[str, Any]:
        """Create a database.

        Args:
            database: Database name (defaults to the configured database)

        Returns:
            {"ok": true} on success

        Raises:
            CouchValidationError: If the name is not a valid database name
            CouchRequestError: 412 if the database already exists
        """
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name),
            method=Method.PUT,
            status_messages={
                201: "Database created successfully",
                202: "Database created, but not all nodes confirmed",
                400: "Invalid database name",
                401: ADMIN_REQUIRED,
                412: "Database already exists",
            },
        ))

    async def get_database(self, database: str | None = None) -> dict[str, Any]:
        """Get database information (doc_count, update_seq, sizes, ...)."""
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name),
            status_messages={200: COMPLETED, 404: "Requested database not found"},
        ))

    async def database_exists(self, database: str | None = None) -> bool:
        """Check whether a database exists.

        Returns:
            True if the server answers 200, False if it answers 404

        Raises:
            CouchRequestError: For any other failure
        """
        name = self._database(database)
        return await self._exists(
            database_path(name),
            {200: "Database exists", 404: "Requested database not found"},
        )

    async def delete_database(self, database: str | None = None) -> dict[str, Any]:
        """Delete a database and all its documents."""
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name),
            method=Method.DELETE,
            status_messages={
                200: "Database removed successfully",
                400: "Invalid database name or forgotten document id by accident",
                401: ADMIN_REQUIRED,
                404: "Database doesn't exist",
            },
        ))

    async def get_security(self, database: str | None = None) -> dict[str, Any]:
        """Get the security object (admins and members) of a database."""
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, "_security"),
            status_messages={200: COMPLETED},
        ))

    async def set_security(
        self,
        admins: dict[str, list[str]] | None = None,
        members: dict[str, list[str]] | None = None,
        database: str | None = None,
    ) -> dict[str, Any]:
        """Replace the security object of a database.

        Args:
            admins: {"names": [...], "roles": [...]} for database admins
            members: {"names": [...], "roles": [...]} for database members
            database: Database name (defaults to the configured database)

        Returns:
            {"ok": true} on success
        """
        name = self._database(database)
        empty = {"names": [], "roles": []}
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, "_security"),
            method=Method.PUT,
            body={"admins": admins or empty, "members": members or empty},
            status_messages={200: COMPLETED, 401: ADMIN_REQUIRED},
        ))

    async def set_revision_limit(self, limit: int, database: str | None = None) -> dict[str, Any]:
        """Set how many document revisions the database tracks."""
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, "_revs_limit"),
            method=Method.PUT,
            body=limit,
            status_messages={200: COMPLETED, 400: "Invalid JSON data"},
        ))

    async def compact_database(self, database: str | None = None) -> dict[str, Any]:
        """Start compaction of a database."""
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, "_compact"),
            method=Method.POST,
            headers={"content-type": "application/json"},
            status_messages={
                202: "Compaction request has been accepted",
                400: "Invalid database name",
                401: ADMIN_REQUIRED,
                415: "Bad Content-Type value",
            },
        ))

    # Users

    async def create_user(
        self,
        username: str,
        password: str,
        roles: list[str] | None = None,
    ) -> dict[str, Any]:
        """Create a user in the _users database."""
        user_id = f"org.couchdb.user:{username}"
        return await self._gateway.request(RequestDescriptor(
            path=database_path("_users", document_segment(user_id)),
            method=Method.PUT,
            body={
                "_id": user_id,
                "name": username,
                "password": password,
                "roles": roles or [],
                "type": "user",
            },
            status_messages={
                201: "User created successfully",
                202: "User accepted, but not yet stored on disk",
                401: ADMIN_REQUIRED,
                409: "User already exists",
            },
        ))

    async def get_user(self, username: str) -> dict[str, Any]:
        """Get a user document."""
        user_id = f"org.couchdb.user:{username}"
        return await self._gateway.request(RequestDescriptor(
            path=database_path("_users", document_segment(user_id)),
            status_messages={**DOCUMENT_READ_MESSAGES, 404: "User not found"},
        ))

    async def delete_user(self, username: str, rev: str) -> dict[str, Any]:
        """Delete a user document at a given revision."""
        user_id = f"org.couchdb.user:{username}"
        query = build_query_string({"rev": rev})
        return await self._gateway.request(RequestDescriptor(
            path=database_path("_users", document_segment(user_id)) + query,
            method=Method.DELETE,
            status_messages={**DOCUMENT_DELETE_MESSAGES, 404: "User not found"},
        ))

    # Documents

    async def list_documents(
        self,
        query: Mapping[str, Any] | None = None,
        database: str | None = None,
    ) -> dict[str, Any]:
        """List documents via _all_docs.

        Args:
            query: Query parameters (include_docs, limit, keys, startkey, ...)
            database: Database name (defaults to the configured database)

        Returns:
            Dictionary with 'total_rows', 'offset' and 'rows'
        """
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, "_all_docs") + build_query_string(query),
            status_messages={**QUERY_MESSAGES, 404: "Requested database not found"},
        ))

    async def find_documents(
        self,
        query: Mapping[str, Any],
        database: str | None = None,
    ) -> dict[str, Any]:
        """Run a declarative _find query.

        Args:
            query: Find request body, e.g. {"selector": {"type": "order"}, "limit": 10}
            database: Database name (defaults to the configured database)

        Returns:
            Dictionary with 'docs' and optional 'bookmark' / 'warning'
        """
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, "_find"),
            method=Method.POST,
            body=dict(query),
            status_messages=QUERY_MESSAGES,
        ))

    async def get_document(
        self,
        doc_id: str,
        query: Mapping[str, Any] | None = None,
        database: str | None = None,
    ) -> dict[str, Any]:
        """Get a document by id.

        Args:
            doc_id: Document identifier
            query: Optional parameters (rev, revs, conflicts, ...)
            database: Database name (defaults to the configured database)
        """
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, document_segment(doc_id)) + build_query_string(query),
            status_messages=DOCUMENT_READ_MESSAGES,
        ))

    async def document_exists(self, doc_id: str, database: str | None = None) -> bool:
        """Check whether a document exists (404 resolves to False)."""
        name = self._database(database)
        return await self._exists(
            database_path(name, document_segment(doc_id)),
            {**DOCUMENT_READ_MESSAGES, 200: "Document exists"},
        )

    async def create_document(
        self,
        doc: Mapping[str, Any],
        doc_id: str | None = None,
        database: str | None = None,
    ) -> dict[str, Any]:
        """Create a document, or update it when doc carries its _rev.

        Without doc_id the document is POSTed and the server assigns an id
        (unless doc has an _id). With doc_id it is PUT at that id.

        Returns:
            {"ok": true, "id": ..., "rev": ...}
        """
        name = self._database(database)
        if doc_id:
            return await self._gateway.request(RequestDescriptor(
                path=database_path(name, document_segment(doc_id)),
                method=Method.PUT,
                body=dict(doc),
                status_messages=DOCUMENT_WRITE_MESSAGES,
            ))
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name),
            method=Method.POST,
            body=dict(doc),
            status_messages={
                **DOCUMENT_WRITE_MESSAGES,
                404: "Database doesn't exist",
                409: "A Conflicting Document with same ID already exists",
            },
        ))

    async def delete_document(
        self,
        doc_id: str,
        rev: str,
        database: str | None = None,
    ) -> dict[str, Any]:
        """Mark a document as deleted at the given revision."""
        name = self._database(database)
        query = build_query_string({"rev": rev})
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, document_segment(doc_id)) + query,
            method=Method.DELETE,
            status_messages=DOCUMENT_DELETE_MESSAGES,
        ))

    async def copy_document(
        self,
        source_id: str,
        destination_id: str,
        rev: str | None = None,
        destination_rev: str | None = None,
        database: str | None = None,
    ) -> dict[str, Any]:
        """Copy a document to a new (or existing) id.

        Args:
            source_id: Id of the document to copy
            destination_id: Target id
            rev: Source revision to copy (latest when None)
            destination_rev: Revision of an existing target to overwrite
            database: Database name (defaults to the configured database)

        Raises:
            CouchValidationError: If either id is missing
        """
        if not source_id or not destination_id:
            raise CouchValidationError("Copy requires both a source and a destination document id")
        name = self._database(database)
        destination = document_segment(destination_id)
        if destination_rev:
            destination += build_query_string({"rev": destination_rev})
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, document_segment(source_id)) + build_query_string({"rev": rev}),
            method=Method.COPY,
            headers={"destination": destination},
            status_messages={
                **DOCUMENT_WRITE_MESSAGES,
                201: "Document successfully created",
                401: "Read or write privileges required",
                404: "Specified database, document ID or revision doesn't exists",
            },
        ))

    async def bulk_documents(
        self,
        docs: list[Mapping[str, Any]],
        database: str | None = None,
        new_edits: bool | None = None,
    ) -> list[dict[str, Any]]:
        """Create or update many documents in one request.

        Returns:
            One {"ok"/"error", "id", "rev"} entry per submitted document
        """
        name = self._database(database)
        body: dict[str, Any] = {"docs": [dict(d) for d in docs]}
        if new_edits is not None:
            body["new_edits"] = new_edits
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, "_bulk_docs"),
            method=Method.POST,
            body=body,
            status_messages={
                201: "Document(s) have been created or updated",
                400: "The request provided invalid JSON data",
                417: "Occurs when at least one document was rejected by a validation function",
                500: "Malformed data provided, while it's still valid JSON",
            },
        ))

    # Design documents and views

    async def get_design_document(
        self,
        ddoc: str,
        query: Mapping[str, Any] | None = None,
        database: str | None = None,
    ) -> dict[str, Any]:
        """Get a design document by its name (without the _design/ prefix)."""
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, document_segment(f"_design/{ddoc}")) + build_query_string(query),
            status_messages=DOCUMENT_READ_MESSAGES,
        ))

    async def create_design_document(
        self,
        ddoc: str,
        doc: Mapping[str, Any],
        database: str | None = None,
    ) -> dict[str, Any]:
        """Create or update a design document (views, validate_doc_update, ...)."""
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, document_segment(f"_design/{ddoc}")),
            method=Method.PUT,
            body=dict(doc),
            status_messages=DOCUMENT_WRITE_MESSAGES,
        ))

    async def delete_design_document(
        self,
        ddoc: str,
        rev: str,
        database: str | None = None,
    ) -> dict[str, Any]:
        """Delete a design document at the given revision."""
        name = self._database(database)
        query = build_query_string({"rev": rev})
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, document_segment(f"_design/{ddoc}")) + query,
            method=Method.DELETE,
            status_messages=DOCUMENT_DELETE_MESSAGES,
        ))

    async def get_view(
        self,
        ddoc: str,
        view: str,
        query: Mapping[str, Any] | None = None,
        database: str | None = None,
    ) -> dict[str, Any]:
        """Query a view of a design document.

        Args:
            ddoc: Design document name (without the _design/ prefix)
            view: View name
            query: View parameters (key, keys, startkey, endkey, reduce, ...).
                Key parameters are sent as JSON literals.
            database: Database name (defaults to the configured database)
        """
        name = self._database(database)
        segments = (
            document_segment(f"_design/{ddoc}"),
            "_view",
            document_segment(view),
        )
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, *segments) + build_query_string(query),
            status_messages={**QUERY_MESSAGES, 500: "View function execution error"},
        ))

    # Indexes

    async def create_index(
        self,
        index: Mapping[str, Any],
        name: str | None = None,
        ddoc: str | None = None,
        database: str | None = None,
    ) -> dict[str, Any]:
        """Create a secondary index for _find queries.

        Args:
            index: Index definition, e.g. {"fields": ["type", "created_at"]}
            name: Optional index name
            ddoc: Optional design document to store the index in
            database: Database name (defaults to the configured database)

        Returns:
            Dictionary with 'result' ("created" or "exists"), 'id' and 'name'
        """
        db_name = self._database(database)
        body: dict[str, Any] = {"index": dict(index)}
        if name:
            body["name"] = name
        if ddoc:
            body["ddoc"] = ddoc
        return await self._gateway.request(RequestDescriptor(
            path=database_path(db_name, "_index"),
            method=Method.POST,
            body=body,
            status_messages={
                200: "Index created successfully or already exists",
                400: "Invalid request",
                401: "Admin permission required",
                500: "Execution error",
            },
        ))

    async def get_indexes(self, database: str | None = None) -> dict[str, Any]:
        """List the indexes of a database."""
        name = self._database(database)
        return await self._gateway.request(RequestDescriptor(
            path=database_path(name, "_index"),
            status_messages={
                200: "Success",
                400: "Invalid request",
                401: "Read permission required",
                500: "Execution error",
            },
        ))

    async def delete_index(
        self,
        ddoc: str,
        name: str,
        database: str | None = None,
    ) -> dict[str, Any]:
        """Delete an index by design document and index name."""
        db_name = self._database(database)
        segments = (
            "_index",
            document_segment(ddoc),
            "json",
            document_segment(name),
        )
        return await self._gateway.request(RequestDescriptor(
            path=database_path(db_name, *segments),
            method=Method.DELETE,
            status_messages={
                200: "Success",
                400: "Invalid request",
                401: "Writer permission required",
                404: "Index not found",
                500: "Execution error",
            },
        ))
