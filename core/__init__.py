from .database import get_db_context, store_operation, init_db, engine, SessionLocal, Base
from .errors import ValidationError, PersistenceError, AIServiceError
from .helpers import generate_record_id, calculate_bmi, bmi_category

__all__ = [
    "get_db_context",
    "store_operation",
    "init_db",
    "engine",
    "SessionLocal",
    "Base",
    "ValidationError",
    "PersistenceError",
    "AIServiceError",
    "generate_record_id",
    "calculate_bmi",
    "bmi_category",
]
