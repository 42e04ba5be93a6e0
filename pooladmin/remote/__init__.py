"""Remote relational store seam.

Everything the entity and audit layers know about the hosted database goes
through RemoteStore: filtered select, get-by-id, insert, update-by-id and
delete-by-id over plain field maps.
"""

from pooladmin.remote.models import Condition, FilterOp, Ordering, Record
from pooladmin.remote.store import RemoteStore

__all__ = ["Condition", "FilterOp", "Ordering", "Record", "RemoteStore"]
