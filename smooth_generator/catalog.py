"""
Store Catalog: where generated objects land.

A deliberately thin sink: every object is one row in `store_objects`, its
full pydantic payload kept as JSON next to a few promoted columns the
generators need to query (email, username, taxonomy, parent, ...). Reads
hand back the pydantic model again.

Generators use it for two things:
    - save what they generate (assigning ids)
    - pull existing objects back for relationships: random products for
      orders and upsells, random customers, cached term ids, uniqueness
      checks for emails and usernames
"""
import json
import logging
import threading
from typing import Dict, List, Optional, Type

import duckdb
import polars as pl

from smooth_generator.schemas.woocommerce import (
    Coupon, Customer, GlobalAttribute, Order, Product, ProductVariation, StoreObject, Term,
)

logger = logging.getLogger(__name__)

OBJECT_MODELS: Dict[str, Type[StoreObject]] = {
    model.object_type: model
    for model in (Coupon, Customer, GlobalAttribute, Order, Product, ProductVariation, Term)
}


class StoreCatalog:
    def __init__(self, db_path: str = ":memory:", connection: Optional[duckdb.DuckDBPyConnection] = None):
        self.db_path = db_path
        self._con = connection or duckdb.connect(db_path)
        self._lock = threading.Lock()
        self._con.execute("CREATE SEQUENCE IF NOT EXISTS store_object_ids START 1")
        self._con.execute("""
            CREATE TABLE IF NOT EXISTS store_objects (
                id BIGINT PRIMARY KEY,
                object_type VARCHAR NOT NULL,
                parent_id BIGINT DEFAULT 0,
                name VARCHAR,
                slug VARCHAR,
                status VARCHAR,
                taxonomy VARCHAR,
                email VARCHAR,
                username VARCHAR,
                payload VARCHAR NOT NULL,
                created_at TIMESTAMP DEFAULT current_timestamp
            )
        """)
        logger.info(f"[Catalog] Using store_objects table in {db_path}")

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        return self._con

    # ═══════════════════════════════════════════════════════════════
    # WRITES
    # ═══════════════════════════════════════════════════════════════

    def save(self, obj: StoreObject) -> StoreObject:
        """Insert or update an object. Unsaved objects (id 0) get an id assigned."""
        with self._lock:
            if not obj.id:
                obj.id = self._con.execute("SELECT nextval('store_object_ids')").fetchone()[0]
            else:
                self._con.execute("DELETE FROM store_objects WHERE id = ?", [obj.id])

            self._con.execute(
                """
                INSERT INTO store_objects
                    (id, object_type, parent_id, name, slug, status, taxonomy, email, username, payload)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    obj.id,
                    obj.object_type,
                    getattr(obj, "parent_id", None) or getattr(obj, "parent", 0) or 0,
                    getattr(obj, "name", None) or getattr(obj, "code", None),
                    getattr(obj, "slug", None),
                    getattr(obj, "status", None),
                    getattr(obj, "taxonomy", None),
                    getattr(obj, "email", None),
                    getattr(obj, "username", None),
                    obj.model_dump_json(),
                ],
            )
        return obj

    # ═══════════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════════

    def get(self, object_type: str, object_id: int) -> Optional[StoreObject]:
        with self._lock:
            row = self._con.execute(
                "SELECT payload FROM store_objects WHERE object_type = ? AND id = ?",
                [object_type, object_id],
            ).fetchone()
        if row is None:
            return None
        return OBJECT_MODELS[object_type].model_validate_json(row[0])

    def all(self, object_type: str) -> List[StoreObject]:
        with self._lock:
            rows = self._con.execute(
                "SELECT payload FROM store_objects WHERE object_type = ? ORDER BY id",
                [object_type],
            ).fetchall()
        model = OBJECT_MODELS[object_type]
        return [model.model_validate_json(r[0]) for r in rows]

    def count(self, object_type: str) -> int:
        with self._lock:
            return self._con.execute(
                "SELECT COUNT(*) FROM store_objects WHERE object_type = ?", [object_type]
            ).fetchone()[0]

    def random_ids(self, object_type: str, limit: int, status: Optional[str] = None) -> List[int]:
        if limit <= 0:
            return []
        query = "SELECT id FROM store_objects WHERE object_type = ?"
        params: list = [object_type]
        if status:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY random() LIMIT ?"
        params.append(limit)
        with self._lock:
            return [r[0] for r in self._con.execute(query, params).fetchall()]

    def random_customer(self) -> Optional[Customer]:
        ids = self.random_ids(Customer.object_type, 1)
        return self.get(Customer.object_type, ids[0]) if ids else None

    def variations(self, product_id: int) -> List[ProductVariation]:
        with self._lock:
            rows = self._con.execute(
                "SELECT payload FROM store_objects WHERE object_type = ? AND parent_id = ? ORDER BY id",
                [ProductVariation.object_type, product_id],
            ).fetchall()
        return [ProductVariation.model_validate_json(r[0]) for r in rows]

    def email_exists(self, email: str) -> bool:
        return self._exists("email", email)

    def username_exists(self, username: str) -> bool:
        return self._exists("username", username)

    def _exists(self, column: str, value: str) -> bool:
        with self._lock:
            row = self._con.execute(
                f"SELECT 1 FROM store_objects WHERE object_type = ? AND lower({column}) = lower(?) LIMIT 1",
                [Customer.object_type, value],
            ).fetchone()
        return row is not None

    # --- Taxonomy ---

    def term_ids(self, taxonomy: str, limit: int = 50, exclude_slugs: Optional[List[str]] = None) -> List[int]:
        query = "SELECT id FROM store_objects WHERE object_type = ? AND taxonomy = ?"
        params: list = [Term.object_type, taxonomy]
        for slug in exclude_slugs or []:
            query += " AND slug != ?"
            params.append(slug)
        query += " ORDER BY id LIMIT ?"
        params.append(limit)
        with self._lock:
            return [r[0] for r in self._con.execute(query, params).fetchall()]

    def term_exists(self, taxonomy: str, name: str, parent: int = 0) -> bool:
        with self._lock:
            row = self._con.execute(
                """
                SELECT 1 FROM store_objects
                WHERE object_type = ? AND taxonomy = ? AND lower(name) = lower(?) AND parent_id = ?
                LIMIT 1
                """,
                [Term.object_type, taxonomy, name, parent],
            ).fetchone()
        return row is not None

    def global_attribute(self, slug: str) -> Optional[GlobalAttribute]:
        with self._lock:
            row = self._con.execute(
                "SELECT payload FROM store_objects WHERE object_type = ? AND slug = ? LIMIT 1",
                [GlobalAttribute.object_type, slug],
            ).fetchone()
        return GlobalAttribute.model_validate_json(row[0]) if row else None

    # ═══════════════════════════════════════════════════════════════
    # EXPORT
    # ═══════════════════════════════════════════════════════════════

    def to_frame(self, object_type: str) -> pl.DataFrame:
        """All objects of a type as a flat DataFrame. Nested fields (addresses, lines, meta) become JSON strings."""
        rows = []
        for obj in self.all(object_type):
            row = obj.model_dump(mode="json")
            rows.append({
                k: json.dumps(v) if isinstance(v, (dict, list)) else v
                for k, v in row.items()
            })
        if not rows:
            return pl.DataFrame()
        return pl.DataFrame(rows, infer_schema_length=None)

    def summary(self) -> Dict[str, int]:
        with self._lock:
            rows = self._con.execute(
                "SELECT object_type, COUNT(*) FROM store_objects GROUP BY object_type ORDER BY object_type"
            ).fetchall()
        return {r[0]: r[1] for r in rows}

    def close(self) -> None:
        with self._lock:
            self._con.close()
