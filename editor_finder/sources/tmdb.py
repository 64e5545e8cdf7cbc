"""
TMDb metadata feed client.

Pulls TV shows and their crew from The Movie Database and turns
editing-department crew into Candidates with origin ``tmdb``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from editor_finder.config import get_tmdb_api_key
from editor_finder.constants import TMDB_ORIGIN, TMDB_RATE_LIMIT
from editor_finder.domain.models import Candidate
from editor_finder.errors import FeedUnavailable
from editor_finder.utils.rate_limiting import get_rate_limiter

logger = logging.getLogger(__name__)

TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_PERSON_URL = "https://www.themoviedb.org/person/{person_id}"
EDITING_DEPARTMENT = "Editing"
EDITOR_JOBS = frozenset(
    {
        "Editor",
        "Supervising Editor",
        "Additional Editor",
        "Assistant Editor",
        "Associate Editor",
        "Online Editor",
        "Offline Editor",
    }
)
# (keyword in job title, specialty); first hit wins
JOB_SPECIALTIES = (
    ("supervising", "Supervising Editor"),
    ("assistant", "Assistant Editor"),
    ("associate", "Associate Editor"),
    ("additional", "Additional Editor"),
    ("online", "Online Editor"),
    ("offline", "Offline Editor"),
)
TMDB_CONFIDENCE = 0.8

_rate_limiter = get_rate_limiter("tmdb", TMDB_RATE_LIMIT)


@dataclass(frozen=True)
class TmdbShow:
    id: int
    name: str
    networks: tuple[str, ...] = ()
    genres: tuple[str, ...] = ()


@dataclass(frozen=True)
class CrewMember:
    id: int
    name: str
    job: str
    department: str


def job_to_specialty(job: str) -> str:
    """Map a TMDb job title to a specialty tag."""
    lowered = job.lower()
    for keyword, specialty in JOB_SPECIALTIES:
        if keyword in lowered:
            return specialty
    return "Editor"


def extract_editors(crew: list[CrewMember]) -> list[CrewMember]:
    """Crew members with an editing job or in the editing department."""
    return [m for m in crew if m.job in EDITOR_JOBS or m.department == EDITING_DEPARTMENT]


def crew_to_candidate(member: CrewMember, show: TmdbShow) -> Candidate:
    tags = tuple(dict.fromkeys((job_to_specialty(member.job),) + show.genres))
    return Candidate(
        name=member.name,
        origin_url=TMDB_PERSON_URL.format(person_id=member.id),
        origin_id=TMDB_ORIGIN,
        tags=tags,
        affiliations=show.networks,
        confidence_hint=TMDB_CONFIDENCE,
    )


def _show_from_json(data: dict[str, Any]) -> TmdbShow:
    return TmdbShow(
        id=int(data["id"]),
        name=data.get("name") or data.get("original_name") or "",
        networks=tuple(n["name"] for n in data.get("networks") or [] if n.get("name")),
        genres=tuple(g["name"] for g in data.get("genres") or [] if g.get("name")),
    )


class TmdbClient:
    """Thin TMDb v3 client over a shared ``requests.Session``."""

    def __init__(
        self,
        api_key: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ):
        self.api_key = api_key or get_tmdb_api_key()
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, endpoint: str, **params: Any) -> dict[str, Any]:
        _rate_limiter()
        url = f"{TMDB_BASE_URL}{endpoint}"
        try:
            response = self.session.get(
                url,
                params={"api_key": self.api_key, **params},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise FeedUnavailable(f"TMDb request {endpoint} failed: {e}") from e
        if response.status_code != 200:
            raise FeedUnavailable(f"TMDb request {endpoint} returned HTTP {response.status_code}")
        return response.json()

    def popular_shows(self, page: int = 1) -> list[TmdbShow]:
        return [_show_from_json(s) for s in self._get("/tv/popular", page=page).get("results", [])]

    def top_rated_shows(self, page: int = 1) -> list[TmdbShow]:
        data = self._get("/tv/top_rated", page=page)
        return [_show_from_json(s) for s in data.get("results", [])]

    def show_details(self, show_id: int) -> TmdbShow:
        """Show with networks and genre names filled in."""
        return _show_from_json(self._get(f"/tv/{show_id}"))

    def crew(self, show_id: int) -> list[CrewMember]:
        data = self._get(f"/tv/{show_id}/credits")
        return [
            CrewMember(
                id=int(m["id"]),
                name=m.get("name", ""),
                job=m.get("job", ""),
                department=m.get("department", ""),
            )
            for m in data.get("crew", [])
        ]
