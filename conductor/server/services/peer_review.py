"""
Peer review service.

Covers rubric resolution and management, review submission with per-prompt
validation, and the project/book average rating that follows every
submission or deletion.

Rubric resolution order: the requested rubric, then the instance
organization's default rubric, then the central ``libretexts`` rubric.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from conductor.core.database.entities.peer_reviews import LIKERT_POINTS, PROMPT_TYPES, PeerReview, PeerReviewRubric
from conductor.core.database.entities.projects import Project
from conductor.core.database.repositories import (
    BookRepository,
    PeerReviewRepository,
    PeerReviewRubricRepository,
    ProjectRepository,
)
from conductor.core.errors import ConductorError, bad_request, not_found, unauthorized
from conductor.core.logging_config import get_logger
from conductor.core.models.io.peer_reviews import PeerReviewCreate, PromptResponseIn, RubricSaveRequest
from conductor.core.utils import generate_b62_id, normalized_sort_key
from conductor.server.core.config import settings
from conductor.server.core.constant import LIBRETEXTS_ORG_ID
from conductor.server.core.deps import ActingUser

from .permissions import has_general_access, is_project_admin, is_project_member

logger = get_logger(__name__)

MAX_TEXT_RESPONSE = 9999
MAX_DROPDOWN_OPTIONS = 11
RUBRIC_TITLE_LENGTH = (4, 200)


def average_rating(ratings: Sequence[Optional[float]]) -> Optional[float]:
    """Mean of the given ratings rounded half-up to the nearest 0.5, or None without ratings."""
    values = [float(r) for r in ratings if r is not None]
    if not values:
        return None
    return math.floor(sum(values) / len(values) * 2 + 0.5) / 2


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _prompt_snapshot(prompt: Dict[str, Any]) -> Dict[str, Any]:
    snapshot = {
        "promptID": prompt.get("promptID"),
        "promptType": prompt.get("promptType"),
        "promptText": prompt.get("promptText"),
        "promptRequired": bool(prompt.get("promptRequired")),
        "order": prompt.get("order"),
    }
    if prompt.get("promptType") == "dropdown":
        snapshot["promptOptions"] = list(prompt.get("promptOptions") or [])
    return snapshot


def evaluate_response(prompt: Dict[str, Any], response: PromptResponseIn) -> Tuple[Optional[Dict[str, Any]], bool]:
    """Check one response against its prompt.

    Returns:
        The answer fields to store (None when the answer is invalid) and
        whether the answer satisfies a required prompt
    """
    prompt_type = prompt.get("promptType")
    if prompt_type in LIKERT_POINTS:
        value = response.likert_response
        if value is not None and 1 <= value <= LIKERT_POINTS[prompt_type]:
            return {"likertResponse": value}, True
    elif prompt_type == "text":
        value = response.text_response
        if value is not None and 0 < len(value) <= MAX_TEXT_RESPONSE:
            return {"textResponse": value}, True
    elif prompt_type == "dropdown":
        options = {o.get("value") for o in prompt.get("promptOptions") or []}
        if response.dropdown_response is not None and response.dropdown_response in options:
            return {"dropdownResponse": response.dropdown_response}, True
    elif prompt_type == "checkbox":
        if response.checkbox_response is not None:
            # an unchecked box is recorded but does not satisfy a required prompt
            return {"checkboxResponse": response.checkbox_response}, response.checkbox_response is True
    return None, False


def build_review_responses(
    prompts: Sequence[Dict[str, Any]], responses: Sequence[PromptResponseIn]
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Match submitted responses to rubric prompts.

    Returns:
        The stored response list (answered prompts, then snapshots of the
        unanswered ones) and the required prompts left unsatisfied
    """
    stored: List[Dict[str, Any]] = []
    unanswered: List[Dict[str, Any]] = []
    missing_required: List[Dict[str, Any]] = []
    for prompt in sorted(prompts, key=lambda p: p.get("order", 0)):
        match = next(
            (
                r
                for r in responses
                if r.prompt_id == prompt.get("promptID")
                and r.prompt_type == prompt.get("promptType")
                and r.order == prompt.get("order")
            ),
            None,
        )
        answer, satisfied = evaluate_response(prompt, match) if match else (None, False)
        if answer is not None:
            stored.append({**_prompt_snapshot(prompt), **answer})
        else:
            unanswered.append(_prompt_snapshot(prompt))
        if prompt.get("promptRequired") and not satisfied:
            missing_required.append(prompt)
    return [*stored, *unanswered], missing_required


def _validate_blocks(blocks: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep headings or text blocks with non-empty text and a numeric order; drop the rest."""
    cleaned = []
    for block in blocks:
        if not isinstance(block, dict):
            continue
        text = _clean_text(block.get("text"))
        if text and _is_number(block.get("order")):
            cleaned.append({"text": text, "order": block["order"]})
    return cleaned


def _validate_dropdown_options(options: Any) -> List[Dict[str, str]]:
    """The first valid options with unique keys, at most ``MAX_DROPDOWN_OPTIONS``.

    Raises:
        ConductorError: err51 when no valid option remains
    """
    cleaned: List[Dict[str, str]] = []
    seen_keys = set()
    for option in options if isinstance(options, list) else []:
        if len(cleaned) >= MAX_DROPDOWN_OPTIONS:
            break
        if not isinstance(option, dict):
            continue
        key, value, text = (_clean_text(option.get(f)) for f in ("key", "value", "text"))
        if not key or not value or not text or key in seen_keys:
            continue
        seen_keys.add(key)
        cleaned.append({"key": key, "value": value, "text": text})
    if not cleaned:
        raise bad_request("err51")
    return cleaned


def validate_prompts(prompts: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep prompts with a known type, non-empty text and a numeric order; drop the rest."""
    cleaned = []
    for prompt in prompts:
        if not isinstance(prompt, dict):
            continue
        prompt_type = prompt.get("promptType")
        text = _clean_text(prompt.get("promptText"))
        if prompt_type not in PROMPT_TYPES or not text or not _is_number(prompt.get("order")):
            continue
        entry: Dict[str, Any] = {
            "promptID": _clean_text(prompt.get("promptID")) or generate_b62_id(8),
            "promptType": prompt_type,
            "promptText": text,
            "promptRequired": prompt.get("promptRequired") in (True, "true"),
            "order": prompt["order"],
        }
        if prompt_type == "dropdown":
            entry["promptOptions"] = _validate_dropdown_options(prompt.get("promptOptions"))
        cleaned.append(entry)
    return cleaned


class PeerReviewService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.reviews = PeerReviewRepository(session)
        self.rubrics = PeerReviewRubricRepository(session)
        self.projects = ProjectRepository(session)
        self.books = BookRepository(session)

    # ------------------------------------------------------------------
    # Rubrics
    # ------------------------------------------------------------------

    async def resolve_rubric(self, rubric_id: Optional[str], do_resolution: bool = True) -> PeerReviewRubric:
        candidates = [rubric_id]
        if do_resolution:
            candidates += [settings.org_id, LIBRETEXTS_ORG_ID]
        for candidate in dict.fromkeys(c for c in candidates if c):
            rubric = await self.rubrics.get_by_id(candidate)
            if rubric is not None:
                return rubric
        raise ConductorError("err48", 404)

    async def get_project_rubric(self, project_id: str) -> PeerReviewRubric:
        project = await self._get_project(project_id)
        return await self.resolve_rubric(project.preferred_pr_rubric or project.org_id)

    async def list_rubrics(self) -> List[PeerReviewRubric]:
        return sorted(await self.rubrics.list(), key=lambda r: normalized_sort_key(r.rubric_title))

    async def has_org_default(self) -> bool:
        return await self.rubrics.get_by_id(settings.org_id) is not None

    async def save_rubric(self, payload: RubricSaveRequest, user: ActingUser) -> Tuple[str, bool]:
        """Create or edit a rubric.

        Returns:
            The rubric identifier and whether it was newly created
        """
        title = _clean_text(payload.rubric_title)
        if not RUBRIC_TITLE_LENGTH[0] <= len(title) <= RUBRIC_TITLE_LENGTH[1]:
            raise bad_request("err1")

        if payload.mode == "edit":
            if not payload.rubric_id:
                raise bad_request("err1")
            rubric = await self.rubrics.get_by_id(payload.rubric_id)
            if rubric is None:
                raise not_found()
            if not user.has_role(rubric.org_id, "campusadmin"):
                raise unauthorized()
        else:
            if not user.has_role(settings.org_id, "campusadmin"):
                raise unauthorized()
            rubric_id = settings.org_id if payload.org_default else generate_b62_id(7)
            if await self.rubrics.get_by_id(rubric_id) is not None:
                raise ConductorError("err3", 409)
            rubric = PeerReviewRubric(
                rubric_id=rubric_id,
                org_id=settings.org_id,
                rubric_title=title,
                is_org_default=payload.org_default,
            )

        rubric.rubric_title = title
        rubric.headings = _validate_blocks(payload.headings)
        rubric.text_blocks = _validate_blocks(payload.text_blocks)
        rubric.prompts = validate_prompts(payload.prompts)

        if payload.mode == "edit":
            await self.rubrics.update(rubric)
        else:
            await self.rubrics.create(rubric)
        logger.info(f"Saved peer review rubric {rubric.rubric_id} (mode={payload.mode})")
        return rubric.rubric_id, payload.mode == "create"

    async def delete_rubric(self, rubric_id: str, user: ActingUser) -> None:
        rubric = await self.rubrics.get_by_id(rubric_id)
        if rubric is None:
            raise not_found()
        if not user.has_role(rubric.org_id, "campusadmin"):
            raise unauthorized()
        await self.rubrics.delete(rubric_id)

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    async def _get_project(self, project_id: str) -> Project:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise not_found()
        return project

    @staticmethod
    def allows_anonymous(project: Project) -> bool:
        return project.visibility == "public" and project.allow_anon_pr

    async def check_access(self, project_id: str, user: ActingUser) -> bool:
        project = await self._get_project(project_id)
        if self.allows_anonymous(project) or is_project_member(project, user):
            return True
        raise unauthorized()

    async def get_project_reviews(self, project_id: str, user: ActingUser) -> Tuple[List[PeerReview], Optional[float]]:
        project = await self._get_project(project_id)
        if not has_general_access(project, user):
            raise unauthorized()
        reviews = await self.reviews.list_for_project(project_id)
        return reviews, average_rating([r.rating for r in reviews])

    async def get_review(self, peer_review_id: str, user: ActingUser) -> PeerReview:
        review = await self.reviews.get_by_id(peer_review_id)
        if review is None:
            raise not_found()
        project = await self._get_project(review.project_id)
        if not has_general_access(project, user):
            raise unauthorized()
        return review

    def _resolve_author(self, project: Project, payload: PeerReviewCreate, user: ActingUser) -> Dict[str, Any]:
        if is_project_member(project, user):
            return {"author": user.uuid, "author_email": None, "anon_author": False}
        if not self.allows_anonymous(project):
            raise unauthorized()
        first, last, email = (_clean_text(v) for v in (payload.author_first, payload.author_last, payload.author_email))
        if first and last and email:
            return {"author": f"{first} {last}", "author_email": email, "anon_author": True}
        if user.is_authenticated:
            return {"author": user.uuid, "author_email": None, "anon_author": False}
        raise unauthorized()

    async def create_review(self, payload: PeerReviewCreate, user: ActingUser) -> str:
        project = await self._get_project(payload.project_id)
        author = self._resolve_author(project, payload, user)

        rubric = await self.resolve_rubric(project.preferred_pr_rubric or project.org_id)
        if not rubric.prompts:
            raise ConductorError("err48", 404)

        if payload.rating is None or not 0 < payload.rating <= 5:
            raise bad_request("err49")
        if payload.prompt_responses is None:
            raise bad_request("err50")

        responses, missing_required = build_review_responses(rubric.prompts, payload.prompt_responses)
        if missing_required:
            logger.debug(
                f"Review for {project.project_id} missing {len(missing_required)} required responses"
            )
            raise bad_request("err49")

        review = PeerReview(
            peer_review_id=generate_b62_id(9),
            project_id=project.project_id,
            author_type=payload.author_type,
            rubric_id=rubric.rubric_id,
            rubric_title=rubric.rubric_title,
            rating=payload.rating,
            headings=list(rubric.headings),
            text_blocks=list(rubric.text_blocks),
            responses=responses,
            **author,
        )
        await self.reviews.create(review)
        await self.update_average_rating(project)
        logger.info(f"Peer review {review.peer_review_id} submitted for project {project.project_id}")
        return review.peer_review_id

    async def delete_review(self, peer_review_id: str, user: ActingUser) -> None:
        review = await self.reviews.get_by_id(peer_review_id)
        if review is None:
            raise not_found()
        project = await self._get_project(review.project_id)
        is_author = bool(user.uuid) and not review.anon_author and review.author == user.uuid
        if not (is_project_admin(project, user) or is_author):
            raise unauthorized()
        await self.reviews.delete(peer_review_id)
        await self.update_average_rating(project)

    async def update_average_rating(self, project: Project) -> Optional[float]:
        """Recompute a project's rating and copy it to the linked book."""
        reviews = await self.reviews.list_for_project(project.project_id)
        average = average_rating([r.rating for r in reviews])
        project.rating = average or 0
        await self.projects.update(project)

        if project.project_url and project.book_id:
            book = await self.books.get_by_id(project.book_id)
            if book is not None:
                book.rating = average or 0
                await self.books.update(book)
        return average
