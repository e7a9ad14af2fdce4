import logging
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from shopbridge.core.exceptions import StoreConflictError, StoreError

logger = logging.getLogger(__name__)


def to_datetime(value: Any) -> Optional[datetime]:
    """Drivers without native timestamps (SQLite) hand back ISO strings."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class BaseRepository:
    """
    Thin gateway over the backing store.

    Every helper opens its own connection and, for writes, commits it: one
    call is one remote round trip. Nothing is cached between calls.
    """

    table_name: str = ""

    def __init__(self, engine: Engine):
        self.engine = engine

    @contextmanager
    def get_db_connection(self) -> Iterator[Connection]:
        """Database connection context manager; only connect failures are translated here"""
        try:
            conn = self.engine.connect()
        except SQLAlchemyError as e:
            logger.error(f"Database connection error: {str(e)}")
            raise StoreError(f"Error de conexión con la base de datos: {str(e)}")
        with conn:
            yield conn

    def execute_query(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute SELECT query and return results as list of dictionaries

        Raises:
            StoreError: When query execution fails
        """
        try:
            with self.get_db_connection() as conn:
                result = conn.execute(text(query), params or {})
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Query execution failed: {query.strip()}, Error: {str(e)}")
            raise StoreError(f"Error al consultar {self.table_name}: {str(e)}", "SELECT")

    def execute_single_query(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """Execute query expecting a single row; None if not found"""
        try:
            with self.get_db_connection() as conn:
                result = conn.execute(text(query), params or {}).first()
                return dict(result._mapping) if result else None
        except SQLAlchemyError as e:
            logger.error(f"Single query execution failed: {query.strip()}, Error: {str(e)}")
            raise StoreError(f"Error al consultar {self.table_name}: {str(e)}", "SELECT")

    def execute_command(
        self,
        command: str,
        params: Optional[Dict[str, Any]] = None
    ) -> int:
        """Execute INSERT/UPDATE/DELETE command, returning the affected row count"""
        try:
            with self.get_db_connection() as conn:
                result = conn.execute(text(command), params or {})
                conn.commit()
                return result.rowcount
        except IntegrityError as e:
            logger.error(f"Integrity constraint violation: {command.strip()}, Error: {str(e)}")
            raise StoreConflictError(f"Violación de integridad en {self.table_name}: {str(e.orig)}", "WRITE")
        except SQLAlchemyError as e:
            logger.error(f"Command execution failed: {command.strip()}, Error: {str(e)}")
            raise StoreError(f"Error al escribir en {self.table_name}: {str(e)}", "WRITE")

    def execute_insert_returning_id(
        self,
        command: str,
        params: Optional[Dict[str, Any]] = None
    ) -> int:
        """Execute INSERT command and return the generated ID"""
        try:
            with self.get_db_connection() as conn:
                result = conn.execute(text(command + " RETURNING id"), params or {})
                new_id = result.scalar()
                conn.commit()
                return new_id
        except IntegrityError as e:
            logger.error(f"Insert with integrity violation: {command.strip()}, Error: {str(e)}")
            raise StoreConflictError(f"Violación de integridad en {self.table_name}: {str(e.orig)}", "INSERT")
        except SQLAlchemyError as e:
            logger.error(f"Insert execution failed: {command.strip()}, Error: {str(e)}")
            raise StoreError(f"Error al insertar en {self.table_name}: {str(e)}", "INSERT")

    def ping(self) -> None:
        """Round-trip a trivial query; raises StoreError if the store is unreachable"""
        self.execute_single_query("SELECT 1 AS ok")
