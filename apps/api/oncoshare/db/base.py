from datetime import datetime

from sqlalchemy import DateTime, MetaData
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


# Tables that may or may not exist in a deployed schema. Never part of
# Base.metadata.create_all(); created by migration or `oncoshare.cli seed-zones`.
optional_metadata = MetaData()
