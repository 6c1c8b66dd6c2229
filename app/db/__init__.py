# app/db/__init__.py
from .db_manager import DbManager
from .unit_of_work import UnitOfWork
from .deps import get_uow, get_db_manager
