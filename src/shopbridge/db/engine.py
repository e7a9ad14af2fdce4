from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from shopbridge.core.config import DatabaseConfig


def create_db_engine(config: DatabaseConfig) -> Engine:
    """Build the SQLAlchemy engine for the backing store"""
    kwargs = {"echo": config.echo}
    if not config.url.startswith("sqlite"):
        kwargs.update(pool_size=config.pool_size, pool_pre_ping=True)

    return create_engine(config.url, **kwargs)
