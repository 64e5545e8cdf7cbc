"""
Unit tests for the TMDb feed client.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from editor_finder.errors import FeedUnavailable
from editor_finder.sources.tmdb import (
    CrewMember,
    TmdbClient,
    TmdbShow,
    crew_to_candidate,
    extract_editors,
    job_to_specialty,
)


def _session_returning(payload, status_code=200):
    mock_session = MagicMock()
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = payload
    mock_session.get.return_value = mock_response
    return mock_session


class TestCrewHelpers:
    """Tests for crew filtering and Candidate conversion."""

    @pytest.mark.parametrize(
        "job,specialty",
        [
            ("Editor", "Editor"),
            ("Supervising Editor", "Supervising Editor"),
            ("Assistant Editor", "Assistant Editor"),
            ("Online Editor", "Online Editor"),
            ("Colorist", "Editor"),
        ],
    )
    def test_job_to_specialty(self, job, specialty):
        assert job_to_specialty(job) == specialty

    def test_extract_editors(self):
        crew = [
            CrewMember(1, "Maria Gonzales", "Editor", "Editing"),
            CrewMember(2, "Lena Vos", "Colorist", "Editing"),
            CrewMember(3, "Tomas Reyes", "Director", "Directing"),
            CrewMember(4, "Anja Berg", "Associate Editor", "Crew"),
        ]
        assert [m.name for m in extract_editors(crew)] == ["Maria Gonzales", "Lena Vos", "Anja Berg"]

    def test_crew_to_candidate(self):
        show = TmdbShow(10, "Late Night", networks=("CBS",), genres=("Talk", "Comedy"))
        candidate = crew_to_candidate(CrewMember(42, "Maria Gonzales", "Editor", "Editing"), show)
        assert candidate.name == "Maria Gonzales"
        assert candidate.origin_id == "tmdb"
        assert candidate.origin_url == "https://www.themoviedb.org/person/42"
        assert candidate.tags == ("Editor", "Talk", "Comedy")
        assert candidate.affiliations == ("CBS",)


class TestTmdbClient:
    """Tests for TmdbClient with a mocked session."""

    @patch("editor_finder.sources.tmdb._rate_limiter")
    def test_popular_shows(self, mock_rate_limiter):
        session = _session_returning(
            {"results": [{"id": 1, "name": "Late Night"}, {"id": 2, "original_name": "Succession"}]}
        )
        shows = TmdbClient(api_key="key", session=session).popular_shows()

        assert [s.name for s in shows] == ["Late Night", "Succession"]
        mock_rate_limiter.assert_called_once()
        args, kwargs = session.get.call_args
        assert args[0].endswith("/tv/popular")
        assert kwargs["params"]["api_key"] == "key"
        assert kwargs["params"]["page"] == 1

    @patch("editor_finder.sources.tmdb._rate_limiter")
    def test_show_details(self, mock_rate_limiter):
        session = _session_returning(
            {
                "id": 1,
                "name": "Late Night",
                "networks": [{"name": "CBS"}, {"id": 9}],
                "genres": [{"name": "Talk"}],
            }
        )
        show = TmdbClient(api_key="key", session=session).show_details(1)
        assert show == TmdbShow(1, "Late Night", networks=("CBS",), genres=("Talk",))

    @patch("editor_finder.sources.tmdb._rate_limiter")
    def test_crew(self, mock_rate_limiter):
        session = _session_returning(
            {"crew": [{"id": 42, "name": "Maria Gonzales", "job": "Editor", "department": "Editing"}]}
        )
        crew = TmdbClient(api_key="key", session=session).crew(1)
        assert crew == [CrewMember(42, "Maria Gonzales", "Editor", "Editing")]

    @patch("editor_finder.sources.tmdb._rate_limiter")
    def test_http_error(self, mock_rate_limiter):
        session = _session_returning({}, status_code=401)
        with pytest.raises(FeedUnavailable, match="401"):
            TmdbClient(api_key="bad", session=session).top_rated_shows()

    @patch("editor_finder.sources.tmdb._rate_limiter")
    def test_network_error(self, mock_rate_limiter):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(FeedUnavailable):
            TmdbClient(api_key="key", session=session).crew(1)
