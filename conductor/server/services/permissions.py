"""
Project permission rules.

- admin: project leads and liaisons
- member: admins plus project members
- general access: members plus auditors, or anyone when the project is public

Super administrators pass every check.
"""

from __future__ import annotations

from conductor.core.database.entities.projects import Project
from conductor.server.core.deps import ActingUser


def is_project_admin(project: Project, user: ActingUser) -> bool:
    if user.is_superadmin:
        return True
    return bool(user.uuid) and user.uuid in (*project.leads, *project.liaisons)


def is_project_member(project: Project, user: ActingUser) -> bool:
    if user.is_superadmin:
        return True
    return bool(user.uuid) and user.uuid in project.team


def has_general_access(project: Project, user: ActingUser) -> bool:
    if project.visibility == "public" or is_project_member(project, user):
        return True
    return bool(user.uuid) and user.uuid in project.auditors
