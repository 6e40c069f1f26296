"""Errors shared by the journal repositories."""
import logging
from contextlib import contextmanager

from django.db import DatabaseError

logger = logging.getLogger(__name__)


class RepoError(Exception):
    """Base error for store operations (auth, database, validation)."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


def require_user(user, error_cls=RepoError):
    """Raise ``error_cls('Not authenticated')`` unless ``user`` is logged in."""
    if user is None or not getattr(user, "is_authenticated", False):
        raise error_cls("Not authenticated")
    return user


@contextmanager
def store_errors(error_cls, action):
    """Re-raise ORM ``DatabaseError`` as ``error_cls`` carrying its message."""
    try:
        yield
    except DatabaseError as e:
        logger.exception(f"{action} failed")
        raise error_cls(str(e)) from e
