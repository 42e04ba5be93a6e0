"""pooladmin: data-access and audit-trail core for the pool-supply back office.

Every mutation made through an entity facade is attributed to an actor,
diffed against its previous state and appended to an immutable audit log.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
