from tender_search.db.models import Base, CatalogueTender, SavedSearch
from tender_search.db.session import (
    SessionLocal,
    get_engine,
    get_session,
    make_session_factory,
)

__all__ = [
    "Base",
    "CatalogueTender",
    "SavedSearch",
    "SessionLocal",
    "get_engine",
    "get_session",
    "make_session_factory",
]
