"""Enum definitions for case, file and feed constants."""

from enum import Enum


class Outcome(str, Enum):
    """Clinical outcome recorded on a case (nullable until known)."""

    REMISSION = "REMISSION"
    TREATMENT_ONGOING = "TREATMENT_ONGOING"
    DECEASED = "DECEASED"
    LOST_TO_FOLLOWUP = "LOST_TO_FOLLOWUP"


class Sex(str, Enum):
    MALE_NEUTERED = "MALE_NEUTERED"
    MALE_INTACT = "MALE_INTACT"
    FEMALE_SPAYED = "FEMALE_SPAYED"
    FEMALE_INTACT = "FEMALE_INTACT"


class CaseStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class FileKind(str, Enum):
    """Kind of file attached to a case; only images are used as thumbnails."""

    IMAGE = "image"
    FILE = "file"


class FeedStatus(str, Enum):
    """Publish status of a feed post. Only PUBLISHED posts are readable."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    MODERATION = "MODERATION"


DEFAULT_CASE_STATUS = CaseStatus.DRAFT.value
DEFAULT_FEED_STATUS = FeedStatus.DRAFT.value
