from retail_ledger.database.base import Base
from retail_ledger.database.engine import engine
from retail_ledger.database.session import SessionLocal, unit_of_work

__all__ = ["Base", "engine", "SessionLocal", "unit_of_work"]
