"""
Analytics Course Endpoints.

This module handles analytics courses, their rosters and members, and the
textbook access requests reviewed by super administrators.
"""

from typing import Literal

from fastapi import APIRouter, Query

from conductor.core.models.io.analytics import (
    AccessRequestDecision,
    AccessRequestListResponse,
    AnalyticsCourseCreate,
    AnalyticsCourseCreatedResponse,
    AnalyticsCourseListResponse,
    AnalyticsCourseResponse,
    AnalyticsCourseUpdate,
    CourseMembersResponse,
    MemberRoleUpdate,
    RosterResponse,
    RosterUpdate,
)
from conductor.core.models.io.common import MessageResponse
from conductor.server.services.deps import (
    AdaptClientDep,
    AnalyticsServiceDep,
    LibreTextsClientDep,
    SuperAdminDep,
    UserDep,
)

router = APIRouter()


# =====================================================================
# Courses
# =====================================================================


@router.post(
    "/courses",
    response_model=AnalyticsCourseCreatedResponse,
    status_code=201,
    summary="Create Analytics Course",
    description="Create a course connected to a LibreTexts textbook, an ADAPT course, or both.",
    response_description="The new course identifier.",
    responses={400: {"description": "Invalid dates, textbook URL or ADAPT sharing key"}},
)
async def create_course(
    payload: AnalyticsCourseCreate,
    service: AnalyticsServiceDep,
    libretexts: LibreTextsClientDep,
    adapt: AdaptClientDep,
    user: UserDep,
) -> AnalyticsCourseCreatedResponse:
    course_id = await service.create(payload, user, libretexts, adapt)
    return AnalyticsCourseCreatedResponse(msg="Successfully created Analytics Course!", course_id=course_id)


@router.get(
    "/courses",
    response_model=AnalyticsCourseListResponse,
    summary="List Analytics Courses",
    description="Retrieve the courses the user instructs or views, sorted by title.",
    response_description="List of courses.",
)
async def list_courses(service: AnalyticsServiceDep, user: UserDep) -> AnalyticsCourseListResponse:
    return AnalyticsCourseListResponse(courses=await service.list_courses(user))


@router.get(
    "/courses/{course_id}",
    response_model=AnalyticsCourseResponse,
    summary="Get Analytics Course",
    description="Retrieve a course the user instructs or views.",
    response_description="The course.",
)
async def get_course(course_id: str, service: AnalyticsServiceDep, user: UserDep) -> AnalyticsCourseResponse:
    return AnalyticsCourseResponse(course=await service.get(course_id, user))


@router.put(
    "/courses/{course_id}",
    response_model=MessageResponse,
    summary="Update Analytics Course",
    description="Update a course's title, term or dates. Instructors only.",
    response_description="Confirmation message.",
)
async def update_course(
    course_id: str, payload: AnalyticsCourseUpdate, service: AnalyticsServiceDep, user: UserDep
) -> MessageResponse:
    changed = await service.update(course_id, payload, user)
    return MessageResponse(msg="Successfully updated course." if changed else "Nothing to update.")


@router.delete(
    "/courses/{course_id}",
    response_model=MessageResponse,
    summary="Delete Analytics Course",
    description="Delete a course. Only its creator may do so.",
    response_description="Confirmation message.",
)
async def delete_course(course_id: str, service: AnalyticsServiceDep, user: UserDep) -> MessageResponse:
    await service.delete(course_id, user)
    return MessageResponse(msg="Successfully deleted course.")


# =====================================================================
# Roster
# =====================================================================


@router.get(
    "/courses/{course_id}/roster",
    response_model=RosterResponse,
    summary="Get Course Roster",
    description="Retrieve a course's student roster.",
    response_description="Sorted roster.",
)
async def get_roster(
    course_id: str,
    service: AnalyticsServiceDep,
    user: UserDep,
    sort: Literal["firstName", "lastName", "email"] = Query(default="lastName"),
) -> RosterResponse:
    course, students = await service.get_roster(course_id, user, sort)
    return RosterResponse(
        course_id=course.course_id,
        students=students,
        has_adapt=bool(course.adapt_course_id),
        can_edit=course.is_instructor(user.uuid),
    )


@router.put(
    "/courses/{course_id}/roster",
    response_model=MessageResponse,
    summary="Update Course Roster",
    description="Replace a course's student roster. Students are deduplicated by email.",
    response_description="Confirmation message.",
)
async def update_roster(
    course_id: str, payload: RosterUpdate, service: AnalyticsServiceDep, user: UserDep
) -> MessageResponse:
    await service.set_roster(course_id, payload.students, user)
    return MessageResponse(msg="Successfully updated roster.")


# =====================================================================
# Members
# =====================================================================


@router.get(
    "/courses/{course_id}/members",
    response_model=CourseMembersResponse,
    summary="Get Course Members",
    description="Retrieve a course's instructors and viewers.",
    response_description="List of members.",
)
async def get_members(course_id: str, service: AnalyticsServiceDep, user: UserDep) -> CourseMembersResponse:
    course, members = await service.get_members(course_id, user)
    return CourseMembersResponse(
        course_id=course.course_id, members=members, can_edit=course.is_instructor(user.uuid)
    )


@router.put(
    "/courses/{course_id}/members/{member_uuid}",
    response_model=MessageResponse,
    summary="Update Member Role",
    description="Change a member between instructor and viewer. The creator's role is fixed.",
    response_description="Confirmation message.",
)
async def update_member_role(
    course_id: str, member_uuid: str, payload: MemberRoleUpdate, service: AnalyticsServiceDep, user: UserDep
) -> MessageResponse:
    await service.update_member_role(course_id, member_uuid, payload.role, user)
    return MessageResponse(msg="Successfully updated member role.")


@router.delete(
    "/courses/{course_id}/members/{member_uuid}",
    response_model=MessageResponse,
    summary="Remove Member",
    description="Remove a member from a course. The creator cannot be removed.",
    response_description="Confirmation message.",
)
async def remove_member(
    course_id: str, member_uuid: str, service: AnalyticsServiceDep, user: UserDep
) -> MessageResponse:
    await service.remove_member(course_id, member_uuid, user)
    return MessageResponse(msg="Successfully removed member.")


# =====================================================================
# Access requests
# =====================================================================


@router.get(
    "/accessrequests",
    response_model=AccessRequestListResponse,
    summary="List Access Requests",
    description="Retrieve open textbook access requests.",
    response_description="List of open requests.",
)
async def list_access_requests(service: AnalyticsServiceDep, user: SuperAdminDep) -> AccessRequestListResponse:
    return AccessRequestListResponse(requests=await service.list_access_requests())


@router.put(
    "/accessrequests/{request_id}",
    response_model=MessageResponse,
    summary="Decide Access Request",
    description="Approve or deny a textbook access request.",
    response_description="Confirmation message.",
)
async def decide_access_request(
    request_id: str, payload: AccessRequestDecision, service: AnalyticsServiceDep, user: SuperAdminDep
) -> MessageResponse:
    await service.decide_access_request(request_id, payload.verb)
    verb = "approved" if payload.verb == "approve" else "denied"
    return MessageResponse(msg=f"Successfully {verb} access request.")
