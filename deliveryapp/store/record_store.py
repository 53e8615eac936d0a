"""
Row-oriented access to the backing database.

Every committed insert/update/delete is announced on the change feed after
the commit succeeds. Writes inside ``transaction()`` share a single commit,
so readers of the feed never see a half-written order.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from deliveryapp.models import TABLES
from deliveryapp.store.change_feed import ChangeEvent, ChangeFeed, DELETE, INSERT, UPDATE
from deliveryapp.store.errors import RecordNotFound, StoreError

logger = logging.getLogger(__name__)


def as_row(record) -> dict:
    return record.model_dump()


class RecordStore:
    def __init__(self, engine, feed: Optional[ChangeFeed] = None):
        self.engine = engine
        self.feed = feed
        self._local = threading.local()

    # -------------------------
    # SESSION HANDLING
    # -------------------------

    def _model(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise StoreError(f"Unknown table: {table}")

    def _column(self, model, column: str):
        if column not in model.model_fields:
            raise StoreError(f"Unknown column {column} on {model.__tablename__}")
        return getattr(model, column)

    @property
    def _session(self) -> Optional[Session]:
        return getattr(self._local, "session", None)

    @contextmanager
    def transaction(self):
        if self._session is not None:
            # nested call joins the outer transaction
            yield self
            return

        session = Session(self.engine, expire_on_commit=False)
        self._local.session = session
        self._local.pending = []
        try:
            yield self
            session.commit()
            events = list(self._local.pending)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Store transaction failed: {e}")
            raise StoreError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            self._local.session = None
            self._local.pending = []
            session.close()

        self._publish(events)

    @contextmanager
    def _reading(self):
        if self._session is not None:
            yield self._session
            return
        try:
            with Session(self.engine, expire_on_commit=False) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Store read failed: {e}")
            raise StoreError(str(e)) from e

    def _queue(self, table: str, kind: str, new: dict, old: Optional[dict] = None):
        self._local.pending.append(ChangeEvent(table=table, kind=kind, new=new, old=old))

    def _publish(self, events):
        if self.feed is None:
            return
        for event in events:
            self.feed.publish(event)

    # -------------------------
    # READS
    # -------------------------

    def select(
        self,
        table: str,
        *,
        eq: Optional[dict] = None,
        in_: Optional[dict] = None,
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> list:
        model = self._model(table)
        statement = select(model)

        for column, value in (eq or {}).items():
            statement = statement.where(self._column(model, column) == value)

        for column, values in (in_ or {}).items():
            statement = statement.where(self._column(model, column).in_(list(values)))

        if order_by:
            order_column = self._column(model, order_by)
            statement = statement.order_by(order_column.desc() if desc else order_column)

        if limit:
            statement = statement.limit(limit)

        with self._reading() as session:
            return list(session.exec(statement).all())

    def get(self, table: str, record_id):
        model = self._model(table)
        with self._reading() as session:
            return session.get(model, record_id)

    def maybe_single(self, table: str, **eq):
        rows = self.select(table, eq=eq, limit=1)
        return rows[0] if rows else None

    # -------------------------
    # WRITES
    # -------------------------

    def insert(self, table: str, rows: dict | Iterable[dict]) -> list:
        model = self._model(table)
        if isinstance(rows, dict):
            rows = [rows]

        with self.transaction():
            session = self._session
            created = [model.model_validate(row) for row in rows]
            session.add_all(created)
            session.flush()
            for record in created:
                self._queue(table, INSERT, as_row(record))

        return created

    def update(self, table: str, record_id, fields: dict):
        model = self._model(table)

        with self.transaction():
            session = self._session
            record = session.get(model, record_id)
            if record is None:
                raise RecordNotFound(table, record_id)

            old = as_row(record)
            for column, value in fields.items():
                self._column(model, column)
                setattr(record, column, value)
            if "updated_at" in model.model_fields and "updated_at" not in fields:
                record.updated_at = datetime.utcnow()

            session.add(record)
            session.flush()
            self._queue(table, UPDATE, as_row(record), old)

        return record

    def delete(self, table: str, *, eq: dict) -> int:
        if not eq:
            raise StoreError("Refusing to delete without a filter")

        with self.transaction():
            session = self._session
            records = self.select(table, eq=eq)
            for record in records:
                self._queue(table, DELETE, {}, as_row(record))
                session.delete(record)
            session.flush()

        return len(records)

    def upsert(self, table: str, rows: dict | Iterable[dict], on_conflict: str) -> list:
        if isinstance(rows, dict):
            rows = [rows]

        saved = []
        with self.transaction():
            for row in rows:
                if on_conflict not in row:
                    raise StoreError(f"Upsert row is missing conflict column {on_conflict}")
                existing = self.maybe_single(table, **{on_conflict: row[on_conflict]})
                if existing is None:
                    saved.extend(self.insert(table, row))
                else:
                    changes = {k: v for k, v in row.items() if k != on_conflict}
                    saved.append(self.update(table, existing.id, changes))

        return saved
