import asyncio
import os
import sys

from sqlalchemy import distinct

# Add the parent directory to sys.path to import pos_access
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pos_access.core.config import get_settings
from pos_access.core.logging import configure_logging
from pos_access.db import SessionLocal
from pos_access.models import EmployeeRecord
from pos_access.services.backends import RemoteServiceError, SqlEmployeeStore
from pos_access.services.employees import rewrite_stored_permissions


def normalize_all():
    configure_logging(get_settings().log_level)
    db = SessionLocal()
    try:
        store = SqlEmployeeStore(db)
        tenants = [row[0] for row in db.query(distinct(EmployeeRecord.tenant_id)).all()]
        print(f"Normalizing stored permissions for {len(tenants)} businesses...")

        total = 0
        for tenant_id in tenants:
            changed = asyncio.run(rewrite_stored_permissions(store, tenant_id))
            if changed:
                print(f"  {tenant_id}: rewrote {changed} employee documents")
            total += changed

        print(f"Done. {total} employee documents rewritten.")
    except RemoteServiceError as e:
        print(f"Normalization failed: {e}")
    finally:
        db.close()


if __name__ == "__main__":
    normalize_all()
