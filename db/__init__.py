from .database import init_db, get_db, get_db_dependency, engine, SessionLocal
from .models import Base, Company, Analysis, Mention
from .crud import (
    get_or_create_company, create_analysis, list_analyses,
    get_analysis, delete_analysis,
)

__all__ = [
    "init_db", "get_db", "get_db_dependency", "engine", "SessionLocal",
    "Base", "Company", "Analysis", "Mention",
    "get_or_create_company", "create_analysis", "list_analyses",
    "get_analysis", "delete_analysis",
]
