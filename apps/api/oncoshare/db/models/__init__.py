"""SQLAlchemy ORM models for the shared-data query layer."""

from oncoshare.db.models.cases import Case, FollowUp
from oncoshare.db.models.clinics import Clinic
from oncoshare.db.models.feed import FeedPost
from oncoshare.db.models.files import CaseFile
from oncoshare.db.models.geo import ng_states
from oncoshare.db.models.vocabulary import AnatomicalSite, TumourType

__all__ = [
    "AnatomicalSite",
    "Case",
    "CaseFile",
    "Clinic",
    "FeedPost",
    "FollowUp",
    "TumourType",
    "ng_states",
]
