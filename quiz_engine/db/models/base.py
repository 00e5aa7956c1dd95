from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for quiz engine tables."""
