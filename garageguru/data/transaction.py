"""
Transactional scope for multi-step writes.

unit_of_work() commits the request session on success and rolls it back on
any exception, so a multi-entity write set is applied all-or-nothing.
Driver failures surface as StoreError; domain errors pass through unchanged.
"""

from contextlib import contextmanager
from sqlalchemy.exc import SQLAlchemyError
from garageguru import db
from garageguru.exceptions import StoreError
from garageguru.logger import get_logger

logger = get_logger("garageguru.data.transaction")


@contextmanager
def unit_of_work(name):
    """
    Provide a transactional scope around a series of operations.

    Usage:
        with unit_of_work("issue_invoice"):
            db.session.add(invoice)
            # Commits on successful exit, rolls back on exception
    """
    logger.debug(f"transaction_started: {name}")
    try:
        yield db.session
        db.session.commit()
        logger.debug(f"transaction_committed: {name}")
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"transaction_rolled_back: {name}", exc_info=True)
        raise StoreError(f"{name} failed and was rolled back") from e
    except Exception:
        db.session.rollback()
        logger.warning(f"transaction_rolled_back: {name}")
        raise
