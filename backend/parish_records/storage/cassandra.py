# backend/parish_records/storage/cassandra.py
"""Cassandra-backed document store (cassandra-driver).

Tables are derived from the ORM models so both tabular backends share one
schema: every table is keyed by ``id`` and columns flagged ``index=True``
get a secondary index. Filters run server-side with ``ALLOW FILTERING``
where CQL can express them; null checks and ordering happen in memory.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from cassandra import DriverException
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import Cluster, NoHostAvailable
from cassandra.policies import DCAwareRoundRobinPolicy
from cassandra.query import dict_factory
from sqlalchemy import JSON, Boolean, DateTime, Float, Integer

from parish_records.models import MODELS
from parish_records.storage.base import (
    Document,
    DocumentStore,
    Filter,
    StoreError,
    as_utc,
    matches,
    sort_documents,
    validate_filters,
)

logger = logging.getLogger(__name__)


def cql_type(sa_type: Any) -> str:
    """Map a SQLAlchemy column type to its CQL storage type."""
    if isinstance(sa_type, JSON):
        return "text"  # serialized JSON
    if isinstance(sa_type, DateTime):
        return "timestamp"
    if isinstance(sa_type, Boolean):
        return "boolean"
    if isinstance(sa_type, Float):
        return "double"
    if isinstance(sa_type, Integer):
        return "int"
    return "text"


def table_specs() -> Dict[str, Dict[str, Any]]:
    """Describe every collection as ``{columns, json_columns, primary_key, indexes}``."""
    specs: Dict[str, Dict[str, Any]] = {}
    for name, model in MODELS.items():
        columns = {col.name: cql_type(col.type) for col in model.__table__.columns}
        specs[name] = {
            "columns": columns,
            "json_columns": {c.name for c in model.__table__.columns if isinstance(c.type, JSON)},
            "primary_key": "id",
            "indexes": [c.name for c in model.__table__.columns if c.index and not c.primary_key],
        }
    return specs


def _quote(name: str) -> str:
    # reserved words such as "date", "type" and "timestamp" are legal column names only when quoted
    return f'"{name}"'


class CassandraDocumentStore(DocumentStore):
    backend = "cassandra"

    def __init__(self, session: Any, keyspace: str, cluster: Any = None) -> None:
        self.session = session
        self.keyspace = keyspace
        self.cluster = cluster
        self.tables = table_specs()
        self.session.row_factory = dict_factory

    @classmethod
    def from_settings(cls, settings) -> "CassandraDocumentStore":
        auth = None
        if settings.cassandra_username:
            auth = PlainTextAuthProvider(
                username=settings.cassandra_username, password=settings.cassandra_password or ""
            )
        cluster = Cluster(
            contact_points=settings.cassandra_hosts,
            port=settings.cassandra_port,
            auth_provider=auth,
            load_balancing_policy=DCAwareRoundRobinPolicy(local_dc=settings.cassandra_datacenter),
            protocol_version=4,
        )
        session = cluster.connect()
        store = cls(session, settings.cassandra_keyspace, cluster=cluster)
        store.create_keyspace()
        session.set_keyspace(settings.cassandra_keyspace)
        logger.info("Connected to Cassandra hosts=%s keyspace=%s", settings.cassandra_hosts, settings.cassandra_keyspace)
        return store

    # ---- helpers ------------------------------------------------------------

    def _spec(self, collection: str) -> Dict[str, Any]:
        try:
            return self.tables[collection]
        except KeyError:
            raise StoreError(f"Unknown collection: {collection}") from None

    def _execute(self, cql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        try:
            return list(self.session.execute(cql, tuple(params)))
        except (DriverException, NoHostAvailable) as exc:
            logger.error("Cassandra query failed: %s | %s", cql, exc)
            raise StoreError(str(exc)) from exc

    def _encode(self, collection: str, data: Document) -> Dict[str, Any]:
        spec = self._spec(collection)
        out: Dict[str, Any] = {}
        for field, value in data.items():
            if field not in spec["columns"]:
                logger.warning("Dropping unknown field %s.%s", collection, field)
                continue
            if field in spec["json_columns"] and value is not None:
                value = json.dumps(value)
            out[field] = as_utc(value)
        return out

    def _decode(self, collection: str, row: Dict[str, Any]) -> Document:
        spec = self._spec(collection)
        doc: Document = {}
        for field in spec["columns"]:
            value = row.get(field)
            if field in spec["json_columns"] and isinstance(value, str):
                value = json.loads(value)
            doc[field] = as_utc(value)
        return doc

    # ---- schema ---------------------------------------------------------------

    def create_keyspace(self, replication_factor: int = 1) -> None:
        self._execute(
            f"CREATE KEYSPACE IF NOT EXISTS {self.keyspace} "
            f"WITH replication = {{'class': 'SimpleStrategy', 'replication_factor': {int(replication_factor)}}}"
        )

    def create_schema(self) -> None:
        self.create_keyspace()
        for name, spec in self.tables.items():
            cols = ", ".join(f"{_quote(col)} {typ}" for col, typ in spec["columns"].items())
            self._execute(
                f"CREATE TABLE IF NOT EXISTS {self.keyspace}.{name} ({cols}, PRIMARY KEY ({_quote(spec['primary_key'])}))"
            )
            for col in spec["indexes"]:
                self._execute(
                    f"CREATE INDEX IF NOT EXISTS {name}_{col}_idx ON {self.keyspace}.{name} ({_quote(col)})"
                )
            logger.info("Ensured table %s.%s", self.keyspace, name)

    # ---- DocumentStore --------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        self._spec(collection)
        rows = self._execute(f"SELECT * FROM {self.keyspace}.{collection} WHERE id = %s", [doc_id])
        return self._decode(collection, rows[0]) if rows else None

    def set(self, collection: str, doc_id: str, data: Document, merge: bool = True) -> None:
        values = self._encode(collection, data)
        if not merge:
            # INSERT only touches the listed columns, so null out the rest explicitly
            for col in self._spec(collection)["columns"]:
                values.setdefault(col, None)
        values["id"] = doc_id
        names = list(values)
        self._execute(
            f"INSERT INTO {self.keyspace}.{collection} ({', '.join(_quote(n) for n in names)}) "
            f"VALUES ({', '.join(['%s'] * len(names))})",
            [values[n] for n in names],
        )

    def delete(self, collection: str, doc_id: str) -> bool:
        existed = self.get(collection, doc_id) is not None
        if existed:
            self._execute(f"DELETE FROM {self.keyspace}.{collection} WHERE id = %s", [doc_id])
        return existed

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        spec = self._spec(collection)
        filters = validate_filters(filters)
        server_side = [f for f in filters if f[2] is not None and f[1] != "!=" and f[0] in spec["columns"]]
        in_memory = [f for f in filters if f not in server_side]

        cql = f"SELECT * FROM {self.keyspace}.{collection}"
        params: List[Any] = []
        if server_side:
            cql += " WHERE " + " AND ".join(f"{_quote(field)} {op.replace('==', '=')} %s" for field, op, _ in server_side)
            params = [value for _, _, value in server_side]
        if limit is not None and not in_memory and not order_by:
            cql += f" LIMIT {int(limit)}"
        if server_side:
            cql += " ALLOW FILTERING"

        docs = [self._decode(collection, row) for row in self._execute(cql, params)]
        docs = [d for d in docs if matches(d, in_memory)]
        docs = sort_documents(docs, order_by, descending)
        return docs[:limit] if limit is not None else docs

    def ping(self) -> None:
        self._execute("SELECT release_version FROM system.local")

    def close(self) -> None:
        if self.cluster is not None:
            self.cluster.shutdown()
