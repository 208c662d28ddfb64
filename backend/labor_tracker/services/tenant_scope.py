"""
Tenant-scoped access to the database session.

Every query issued through a ``TenantScope`` is filtered by the scope's tenant
id, and every new row added through it is stamped with that id. Services and
routes take a scope rather than a bare session.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from .errors import Unauthenticated


class TenantScope:
    """Wraps a session and confines it to one tenant."""

    def __init__(self, db: Session, tenant_id: Optional[UUID]):
        if tenant_id is None:
            raise Unauthenticated("Tenant could not be resolved for this request")
        self._db = db
        self.tenant_id = tenant_id

    def query(self, model_class, *entities):
        """
        Start a query on ``model_class`` restricted to this tenant.

        Extra ``entities`` select columns instead of whole rows; the tenant
        filter is still applied on ``model_class``.
        """
        query = self._db.query(*entities) if entities else self._db.query(model_class)
        return query.filter(model_class.tenant_id == self.tenant_id)

    def get(self, model_class, record_id: UUID):
        """Fetch one row by id, or ``None`` if it belongs to another tenant."""
        return self.query(model_class).filter(model_class.id == record_id).first()

    def add(self, record):
        record.tenant_id = self.tenant_id
        self._db.add(record)
        return record

    def flush(self):
        self._db.flush()

    def commit(self):
        self._db.commit()

    def rollback(self):
        self._db.rollback()

    def refresh(self, record):
        self._db.refresh(record)

    def savepoint(self):
        """Open a nested transaction; use as a context manager."""
        return self._db.begin_nested()
