"""Persistence of optimization results."""

import logging
import threading
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .database import get_connection, metadata, optimization_results_table
from .exceptions import ResultNotFound, StorageError
from .optimizer.types import OptimizationResult

logger = logging.getLogger(__name__)


class ResultStore(Protocol):
    """Append-only store of optimization results keyed by request id."""

    def save(self, request_id: str, result: OptimizationResult) -> bool:
        """Store a result.

        Saving is idempotent: a second save under the same ``request_id``
        keeps the first result.

        Returns:
            True if the result was written, False if it was already stored
        """
        ...

    def load(self, request_id: str) -> OptimizationResult:
        """Load a stored result.

        Raises:
            ResultNotFound: If nothing is stored under ``request_id``
        """
        ...


class InMemoryResultStore:
    """Process-local result store."""

    def __init__(self) -> None:
        self._results: dict[str, OptimizationResult] = {}
        self._lock = threading.RLock()

    def save(self, request_id: str, result: OptimizationResult) -> bool:
        with self._lock:
            if request_id in self._results:
                return False
            self._results[request_id] = result.model_copy(deep=True)
            return True

    def load(self, request_id: str) -> OptimizationResult:
        with self._lock:
            try:
                return self._results[request_id].model_copy(deep=True)
            except KeyError:
                raise ResultNotFound(f"No result stored for request '{request_id}'") from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)


class SQLResultStore:
    """Result store on a SQLAlchemy engine."""

    def __init__(self, engine: Engine, *, create_tables: bool = True):
        """
        Initialize the store.

        Args:
            engine: SQLAlchemy engine (see ``create_db_engine``)
            create_tables: Create the results table if it does not exist
        """
        self.engine = engine
        if create_tables:
            try:
                metadata.create_all(engine, tables=[optimization_results_table])
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to create results table: {e}") from e

    def save(self, request_id: str, result: OptimizationResult) -> bool:
        row = {
            "request_id": request_id,
            "original_prompt": result.original_prompt,
            "optimized_prompt": result.optimized_prompt,
            "score_before": result.quality_improvement.before.score,
            "score_after": result.quality_improvement.after.score,
            "improvement": result.improvement,
            "applied_count": len(result.applied_optimizations),
            "result_json": result.model_dump_json(),
        }
        try:
            with get_connection(self.engine) as conn:
                conn.execute(optimization_results_table.insert().values(**row))
        except IntegrityError:
            logger.debug(f"Result for request {request_id} already stored")
            return False
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save result {request_id}: {e}") from e
        return True

    def load(self, request_id: str) -> OptimizationResult:
        query = select(optimization_results_table.c.result_json).where(
            optimization_results_table.c.request_id == request_id
        )
        try:
            with get_connection(self.engine) as conn:
                payload = conn.execute(query).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load result {request_id}: {e}") from e

        if payload is None:
            raise ResultNotFound(f"No result stored for request '{request_id}'")
        return OptimizationResult.model_validate_json(payload)

    def count(self) -> int:
        query = select(func.count()).select_from(optimization_results_table)
        try:
            with get_connection(self.engine) as conn:
                return int(conn.execute(query).scalar_one())
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to count results: {e}") from e
