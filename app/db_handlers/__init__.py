from app.db_handlers.base import BaseDBHandler, check_local_db
from app.db_handlers.entity import EntityDBHandler
from app.db_handlers.wrestler_association import WrestlerAssociationDBHandler

__all__ = [
    "BaseDBHandler",
    "check_local_db",
    "EntityDBHandler",
    "WrestlerAssociationDBHandler",
]
