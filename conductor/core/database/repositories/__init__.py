"""Data access layer: one repository per table."""

from .adoption_reports import AdoptionReportRepository
from .analytics import AnalyticsAccessRequestRepository, AnalyticsCourseRepository
from .base import AsyncBaseRepository, AsyncSQLModelRepository, QueryBuilder
from .books import BookRepository
from .cid_descriptors import CIDDescriptorRepository
from .collections import CollectionRepository
from .organizations import CustomCatalogRepository, OrganizationRepository
from .peer_reviews import PeerReviewRepository, PeerReviewRubricRepository
from .projects import BatchUpdateJobRepository, ProjectRepository

__all__ = [
    "AdoptionReportRepository",
    "AnalyticsAccessRequestRepository",
    "AnalyticsCourseRepository",
    "AsyncBaseRepository",
    "AsyncSQLModelRepository",
    "BatchUpdateJobRepository",
    "BookRepository",
    "CIDDescriptorRepository",
    "CollectionRepository",
    "CustomCatalogRepository",
    "OrganizationRepository",
    "PeerReviewRepository",
    "PeerReviewRubricRepository",
    "ProjectRepository",
    "QueryBuilder",
]
