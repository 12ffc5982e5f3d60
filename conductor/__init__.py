"""Conductor.

This package contains the service layer of the Conductor OER platform: the
Commons catalog of open textbooks, campus collections, peer review of
book-authoring projects, adoption reports, C-ID descriptors, analytics courses
and batch AI metadata generation for book pages.

Core subpackages
----------------

- ``conductor.core``:

  - Logging and monitoring configuration.
  - The Conductor error table.
  - SQLModel entities, repositories and I/O schemas.

- ``conductor.server``:

  - The FastAPI application, routers and middleware.
  - Service modules holding the catalog, collection, peer review, analytics
    and batch job logic, plus the clients for the LibreTexts, ADAPT and
    c-id.net APIs.
"""
