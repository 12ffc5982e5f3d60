"""
SQLModel table definitions, one module per business area.

Importing this package registers every table on ``Base.metadata``.
"""

from .adoption_reports import AdoptionReport
from .analytics import AnalyticsAccessRequest, AnalyticsCourse
from .books import Book
from .cid_descriptors import CIDDescriptor
from .collections import Collection
from .organizations import CustomCatalog, Organization
from .peer_reviews import PeerReview, PeerReviewRubric
from .projects import BatchUpdateJob, Project

__all__ = [
    "AdoptionReport",
    "AnalyticsAccessRequest",
    "AnalyticsCourse",
    "BatchUpdateJob",
    "Book",
    "CIDDescriptor",
    "Collection",
    "CustomCatalog",
    "Organization",
    "PeerReview",
    "PeerReviewRubric",
    "Project",
]
