import dataclasses

import pytest

from epic_allocator.domain.errors import (
    AllocatorError,
    EpicNotFoundError,
    InvalidRequestError,
    NoCommitsError,
)
from epic_allocator.domain.models import (
    Epic,
    ExpertiseProfile,
    ExpertiseScore,
    FileStat,
    ScoreBreakdown,
    UserStory,
)
from tests.builders import make_profile


class TestFileStat:
    def test_defaults(self):
        f = FileStat("a.py")
        assert f.additions == 0
        assert f.deletions == 0

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            FileStat("a.py").additions = 3


class TestEpicStoryPoints:
    def test_sum_of_estimates(self):
        epic = Epic("E1", "t", user_stories=[UserStory("a", 3), UserStory("b", 8)])
        assert epic.total_story_points == 11

    def test_missing_estimate_counts_five(self):
        epic = Epic("E1", "t", user_stories=[UserStory("a", 3), UserStory("b")])
        assert epic.total_story_points == 8

    def test_zero_estimate_counts_five(self):
        epic = Epic("E1", "t", user_stories=[UserStory("a", 0)])
        assert epic.total_story_points == 5

    def test_empty_epic_counts_ten(self):
        assert Epic("E1", "t").total_story_points == 10


class TestExpertiseProfile:
    def test_score_for(self):
        profile = ExpertiseProfile(
            primary="Backend Development",
            ranked=[ExpertiseScore("Backend Development", 12)],
            technologies=["PY"],
        )
        assert profile.score_for("Backend Development").score == 12
        assert profile.score_for("Frontend Development") is None


class TestDeveloperProfile:
    def test_shortcuts(self):
        dev = make_profile("alice", primary="Full Stack", level="Senior")
        assert dev.primary_expertise == "Full Stack"
        assert dev.experience_tier == "Senior"


class TestScoreBreakdown:
    def test_total(self):
        assert ScoreBreakdown(40.0, 30.0, 5.0).total == 75.0


class TestErrors:
    def test_epic_not_found(self):
        e = EpicNotFoundError("E9")
        assert e.epic_id == "E9"
        assert "E9" in str(e)
        assert isinstance(e, LookupError)
        assert isinstance(e, AllocatorError)

    def test_no_commits(self):
        e = NoCommitsError("bob")
        assert e.username == "bob"
        assert str(e) == "No commits found for bob"

    def test_invalid_request_is_value_error(self):
        assert issubclass(InvalidRequestError, ValueError)
