"""Transactions as context managers, nested with SAVEPOINTs.

    with transaction() as t:
        t.execute(Insert("users", ["name"]).values(["alice"]))
        with transaction():                 # SAVEPOINT savepoint_2
            ...                             # an exception here only undoes the inner block
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Optional

from .database import Database
from .exceptions import TransactionError
from .query import Query
from .types import QueryType

logger = logging.getLogger("quarry")


class TransactionManager:
    """Tracks the per-thread nesting depth of transactions on one database instance."""

    def __init__(self, db: Database):
        self.db = db
        self._local = threading.local()

    # nesting depth, 0 outside any transaction

    def _get_transaction_level(self):
        return getattr(self._local, "transaction_level", 0)

    def _set_transaction_level(self, level):
        self._local.transaction_level = level

    @contextmanager
    def transaction(self, mode: Optional[str] = None):
        """Open a transaction, or a savepoint inside an open one.

        The outermost level runs begin(mode) and commit() or rollback(); deeper
        levels run SAVEPOINT savepoint_<level> and release it or roll back to it.
        The exception that caused a rollback is re-raised.
        """
        db = self.db
        level = self._get_transaction_level()
        new_level = level + 1

        savepoint_name = f"savepoint_{new_level}" if new_level > 1 else None
        if savepoint_name:
            logger.debug("SAVEPOINT %s", savepoint_name)
            db.savepoint(savepoint_name)
        else:
            logger.debug("BEGIN on %s", db)
            db.begin(mode)
        self._set_transaction_level(new_level)

        transaction_obj = Transaction(db, self, new_level)
        try:
            yield transaction_obj

            if savepoint_name:
                logger.debug("RELEASE SAVEPOINT %s", savepoint_name)
                db.release_savepoint(savepoint_name)
            else:
                logger.debug("COMMIT on %s", db)
                db.commit()

        except Exception:
            if savepoint_name:
                logger.debug("ROLLBACK TO SAVEPOINT %s", savepoint_name)
                db.rollback_to_savepoint(savepoint_name)
            else:
                logger.debug("ROLLBACK on %s", db)
                db.rollback()
            raise
        finally:
            transaction_obj.active = False
            self._set_transaction_level(level)


class Transaction:
    """Handle yielded by transaction(); runs statements at its own nesting level."""

    def __init__(self, db: Database, manager: TransactionManager, level: int):
        self.db = db
        self._manager = manager
        self.level = level
        self.active = True

    def execute(self, query: Query | str, query_type: QueryType = QueryType.UPDATE, parameters: Optional[dict] = None) -> Any:
        """Run a Query (or builder), or raw SQL of the given type, on the transaction's database.

        Raises:
            TransactionError: The block has exited, or a nested transaction is open.
        """
        if not self.active:
            raise TransactionError("Transaction is no longer active")

        current_level = self._manager._get_transaction_level()  # pylint: disable=protected-access
        if current_level > self.level:
            raise TransactionError(
                f"Cannot use transaction level {self.level} from level {current_level}. "
                "Finish the nested transaction first."
            )
        if isinstance(query, Query):
            return query.execute(self.db)
        return self.db.query(query_type, query, parameters)


_transaction_managers: dict[str, TransactionManager] = {}
_lock = threading.Lock()


def transaction(db: Database | str | None = None, mode: Optional[str] = None):
    """Open a transaction (or a savepoint, when nested) on a database instance."""
    db = Database.resolve(db)
    with _lock:
        manager = _transaction_managers.get(db.name)
        if manager is None or manager.db is not db:
            manager = _transaction_managers[db.name] = TransactionManager(db)
    return manager.transaction(mode)
