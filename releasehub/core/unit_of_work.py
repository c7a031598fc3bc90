from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker
from releasehub.repositories.config_entry import ConfigEntryRepo
from releasehub.repositories.download_record import DownloadRecordRepo
from releasehub.repositories.link import LinkRepo
from releasehub.repositories.subscriber import SubscriberRepo


class UnitOfWork:
    """Unit of Work pattern implementation for managing database transactions.

    Provides centralized access to all repositories and manages transaction boundaries
    (commit/rollback). Uses lazy-loading to instantiate repositories only when needed.
    Supports context manager protocol for automatic transaction handling.
    """
    def __init__(self, session: Session):
        """Initialize the UnitOfWork with a database session.
        Args:
            session: SQLAlchemy session object for database operations.
        """
        self.session = session
        self._link_repo = None
        self._download_repo = None
        self._subscriber_repo = None
        self._config_repo = None

    @property
    def link_repo(self) -> LinkRepo:
        if self._link_repo is None:
            self._link_repo = LinkRepo(self.session)
        return self._link_repo

    @property
    def download_repo(self) -> DownloadRecordRepo:
        if self._download_repo is None:
            self._download_repo = DownloadRecordRepo(self.session)
        return self._download_repo

    @property
    def subscriber_repo(self) -> SubscriberRepo:
        if self._subscriber_repo is None:
            self._subscriber_repo = SubscriberRepo(self.session)
        return self._subscriber_repo

    @property
    def config_repo(self) -> ConfigEntryRepo:
        if self._config_repo is None:
            self._config_repo = ConfigEntryRepo(self.session)
        return self._config_repo

    def commit(self) -> None:
        """Commit the current transaction to the database."""
        self.session.commit()

    def rollback(self) -> None:
        """Rollback the current transaction, undoing all pending changes."""
        self.session.rollback()

    def __enter__(self):
        """Enter context manager - returns self for use in with statement."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - automatically commits or rollbacks transaction.

        If an exception occurred, the transaction is rolled back.
        Otherwise, the transaction is committed.
        """
        if exc_type:
            self.rollback()
        else:
            self.commit()


@contextmanager
def unit_of_work(session_factory: sessionmaker) -> Iterator[UnitOfWork]:
    """Open a session, run one transaction in it and close it.

    Each call gets its own session, so callers on different threads never
    share one.
    """
    db = session_factory()
    try:
        with UnitOfWork(db) as uow:
            yield uow
    finally:
        db.close()
