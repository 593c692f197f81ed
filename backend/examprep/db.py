from __future__ import annotations
import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import text

logger = logging.getLogger(__name__)


def connect_store(database_url: Optional[str]) -> Optional[Engine]:
	"""Open the optional store. Returns None (memory-only mode) when unset or unreachable."""
	if not database_url:
		logger.info("Database not configured - running in memory mode")
		return None
	connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
	try:
		engine = create_engine(database_url, connect_args=connect_args, pool_pre_ping=True, future=True)
		with engine.connect() as conn:
			conn.execute(text("SELECT 1"))
	except (SQLAlchemyError, ImportError) as err:
		# ImportError covers a URL whose DBAPI driver is not installed
		logger.warning("Database connection failed: %s", err)
		logger.info("Continuing without database - using memory storage")
		return None
	logger.info("Database connected (%s)", engine.url.get_backend_name())
	return engine


def ping_store(engine: Optional[Engine]) -> bool:
	if engine is None:
		return False
	try:
		with engine.connect() as conn:
			conn.execute(text("SELECT 1"))
	except SQLAlchemyError as err:
		logger.warning("Database ping failed: %s", err)
		return False
	return True


def dispose_store(engine: Optional[Engine]) -> None:
	if engine is not None:
		engine.dispose()
