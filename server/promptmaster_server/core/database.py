"""Database connection and schema management using SQLAlchemy Core"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    func,
)
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./promptmaster.db"

metadata = MetaData()

# Optimization results table - one row per optimize() request
# The full OptimizationResult is stored as JSON; the other columns are for querying
optimization_results_table = Table(
    "optimization_results",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("request_id", String(64), unique=True, nullable=False, index=True),
    Column("original_prompt", Text, nullable=False),
    Column("optimized_prompt", Text, nullable=False),
    Column("score_before", Float, nullable=False),  # type: ignore[misc]
    Column("score_after", Float, nullable=False),  # type: ignore[misc]
    Column("improvement", Float, nullable=False),  # type: ignore[misc]
    Column("applied_count", Integer, server_default="0", nullable=False),
    Column("result_json", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


def create_db_engine(database_url: Optional[str] = None, **kwargs: Any) -> Engine:
    """
    Create SQLAlchemy engine.

    Args:
        database_url: Database connection string (defaults to a local SQLite file)
        **kwargs: Additional engine options

    Returns:
        SQLAlchemy Engine instance
    """
    url = database_url or DEFAULT_DATABASE_URL

    engine_options: dict[str, Any] = {"echo": False}
    if not url.startswith("sqlite"):
        # Pooling options only apply to server databases
        engine_options.update(
            {
                "pool_pre_ping": True,  # Verify connections before using
                "pool_recycle": 3600,  # Recycle connections after 1 hour
                "pool_size": 5,
                "max_overflow": 10,
            }
        )

    engine_options.update(kwargs)

    return create_engine(url, **engine_options)


@contextmanager
def get_connection(engine: Engine):
    """
    Context manager for database connections.

    Usage:
        with get_connection(engine) as conn:
            result = conn.execute(...)
    """
    conn = engine.connect()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
