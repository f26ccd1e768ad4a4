from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel

from .core.errors import DuplicateRecord, StoreError
from .core.logging import get_logger


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)

# SQLSTATE 23505 on PostgreSQL; SQLite and MySQL only report it in the message
_UNIQUE_MARKERS = ("unique constraint", "duplicate key", "duplicate entry")


def is_unique_violation(exc: IntegrityError) -> bool:
    if getattr(exc.orig, "pgcode", None) == "23505":
        return True
    message = str(exc.orig).lower()
    return any(marker in message for marker in _UNIQUE_MARKERS)


class Store:
    """Persistence gateway over one SQLModel session.

    Services only talk to the database through this class. Any SQLAlchemy
    failure rolls the session back and is re-raised as ``StoreError`` with the
    driver message; unique-constraint violations become ``DuplicateRecord``.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            self.session.rollback()
            if not is_unique_violation(exc):
                logger.error("store_error", action=action, error=str(exc.orig))
                raise StoreError(str(exc.orig)) from exc
            logger.warning("store_duplicate", action=action, error=str(exc.orig))
            raise DuplicateRecord(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("store_error", action=action, error=str(exc))
            raise StoreError(str(exc)) from exc

    def get(self, model: Type[ModelT], ident: Any) -> Optional[ModelT]:
        with self._guard("get"):
            return self.session.get(model, ident)

    def first(self, statement) -> Any:
        with self._guard("first"):
            return self.session.exec(statement).first()

    def all(self, statement) -> List[Any]:
        with self._guard("all"):
            return list(self.session.exec(statement).all())

    def scalar(self, statement) -> Any:
        with self._guard("scalar"):
            return self.session.exec(statement).one()

    def save(self, record: ModelT) -> ModelT:
        with self._guard("save"):
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        return record

    def delete(self, record: SQLModel) -> None:
        with self._guard("delete"):
            self.session.delete(record)
            self.session.commit()
