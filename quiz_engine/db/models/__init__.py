# SQLAlchemy models
from .base import Base
from .sessions import SessionRecord
