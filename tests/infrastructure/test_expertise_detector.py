from epic_allocator.domain.models import FileStat
from epic_allocator.domain.taxonomy import GENERAL_DEVELOPMENT, Category
from epic_allocator.infrastructure.expertise_detector import (
    detect_expertise,
    score_categories,
)


def _files(*names: str) -> list[FileStat]:
    return [FileStat(n) for n in names]


class TestScoreCategories:
    def test_extension_and_path(self):
        scores, techs = score_categories(_files("api/server.py"))
        # py extension (+2) and api/ directory (+3)
        assert scores[Category.BACKEND] == 5
        # py is also a data science extension
        assert scores[Category.DATA_SCIENCE] == 2
        assert techs == ["PY"]

    def test_config_marker(self):
        scores, techs = score_categories(_files("Dockerfile"))
        assert scores[Category.DEVOPS] == 5
        assert techs == ["Dockerfile"]

    def test_config_marker_shared_by_categories(self):
        scores, _ = score_categories(_files("requirements.txt"))
        assert scores[Category.BACKEND] == 5
        assert scores[Category.DATA_SCIENCE] == 5

    def test_extension_counts_added(self):
        scores, _ = score_categories([], {"sql": 7})
        assert scores[Category.DATABASE] == 7

    def test_extension_counts_accept_dotted_keys(self):
        scores, _ = score_categories([], {".GO": 3})
        assert scores[Category.BACKEND] == 3

    def test_full_stack_never_scored(self):
        scores, _ = score_categories(_files("src/components/App.jsx", "api/x.go"))
        assert scores[Category.FULL_STACK] == 0


class TestDetectExpertise:
    def test_no_signal_is_general_development(self):
        profile = detect_expertise([])
        assert profile.primary == GENERAL_DEVELOPMENT
        assert len(profile.ranked) == 1
        assert profile.ranked[0].name == GENERAL_DEVELOPMENT
        assert profile.ranked[0].score == 0

    def test_unrecognized_files_are_general_development(self):
        profile = detect_expertise(_files("notes.txt", "LICENSE"))
        assert profile.primary == GENERAL_DEVELOPMENT

    def test_single_dominant_category(self):
        profile = detect_expertise(_files("api/server.py"))
        assert profile.primary == "Backend Development"
        assert [(e.name, e.score) for e in profile.ranked] == [
            ("Backend Development", 5),
            ("Data Science/ML", 2),
        ]

    def test_three_significant_categories_is_full_stack(self):
        profile = detect_expertise(_files(
            "src/components/App.jsx",   # Frontend 5
            "api/handler.go",           # Backend 5
            "deploy/main.tf",           # DevOps 5
        ))
        assert profile.primary == "Full Stack"
        assert [e.name for e in profile.ranked] == [
            "Frontend Development",
            "Backend Development",
            "DevOps/Infrastructure",
        ]

    def test_full_stack_lists_all_significant(self):
        counts = {"jsx": 10, "go": 10, "tf": 10, "sql": 9, "lua": 1}
        profile = detect_expertise([], counts)
        assert profile.primary == "Full Stack"
        names = [e.name for e in profile.ranked]
        assert len(names) == 4
        assert "Game Development" not in names

    def test_two_significant_categories_is_not_full_stack(self):
        profile = detect_expertise([], {"jsx": 10, "go": 9, "sql": 1})
        assert profile.primary == "Frontend Development"

    def test_ranked_list_capped_at_four(self):
        counts = {"go": 100, "jsx": 1, "sql": 1, "lua": 1, "dart": 1}
        profile = detect_expertise([], counts)
        assert profile.primary == "Backend Development"
        assert [e.name for e in profile.ranked] == [
            "Backend Development",
            "Mobile Development",
            "Frontend Development",
            "Database/SQL",
        ]

    def test_technologies_capped_at_ten(self):
        names = [f"f.{ext}" for ext in (
            "swift", "kt", "dart", "jsx", "tsx", "vue", "go", "rb", "php", "sql", "lua", "tf",
        )]
        profile = detect_expertise(_files(*names))
        assert len(profile.technologies) == 10
        assert profile.technologies[0] == "SWIFT"

    def test_score_for_lookup(self):
        profile = detect_expertise(_files("api/server.py"))
        assert profile.score_for("Backend Development").score == 5
        assert profile.score_for("Game Development") is None
