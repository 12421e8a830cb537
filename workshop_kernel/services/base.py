"""
BaseService -- abstract base for flush-only services.

Responsibility:
    Provides the common constructor and session-handling contract for
    services that take part in a larger transaction.  The stock ledger and
    the order quota guard inherit from BaseService: they use
    ``session.flush()`` -- never ``session.commit()`` -- so that the order
    service can apply every line of an order as one all-or-nothing unit.

Failure modes:
    - If a subclass calls ``session.commit()`` itself, a failure on a later
      order line could no longer roll back the earlier lines.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from workshop_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for flush-only services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()`` -- the caller controls transaction
          boundaries.
    """

    def __init__(self, session: Session):
        self.session = session
