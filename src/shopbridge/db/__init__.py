from shopbridge.db.engine import create_db_engine
from shopbridge.db.tables import Base, create_schema

__all__ = ["Base", "create_db_engine", "create_schema"]
