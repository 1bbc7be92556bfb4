"""
Error types raised by the article aggregate.

Validation and state errors are detected in memory before any I/O.
Database failures are not wrapped: ``PersistenceError`` is SQLAlchemy's
own base exception, re-raised verbatim after the session is rolled back.
"""
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

PersistenceError = SQLAlchemyError


class ArticleStoreError(Exception):
    """Base exception for errors raised by this package."""
    pass


class ValidationError(ArticleStoreError):
    """
    An Article broke one or more validation rules.

    ``rules`` holds every broken rule, not just the first one found.
    """
    def __init__(self, rules: Iterable):
        self.rules = frozenset(rules)
        names = ", ".join(sorted(rule.value for rule in self.rules))
        super().__init__(f"Article failed validation: {names}")


class ArticleStateError(ArticleStoreError):
    """An operation was attempted from the wrong lifecycle state."""
    pass
