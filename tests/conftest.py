import os
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Fixed anchor so commit hours (and on-time classification) are deterministic
BASE_DATE = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository."""
    subprocess.run(
        ["git", "init", str(tmp_path)],
        capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "-C", str(tmp_path), "config", "user.name", "Test User"],
        capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "-C", str(tmp_path), "config", "user.email", "test@example.com"],
        capture_output=True, check=True,
    )
    return tmp_path


def commit_files(
    repo: Path,
    files: dict[str, str],
    message: str,
    days_ago: int = 0,
    author_name: str = "Test User",
    author_email: str = "test@example.com",
) -> None:
    """Create a single commit touching multiple files at a known date."""
    for file_path, content in files.items():
        full_path = repo / file_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content)

    date = BASE_DATE - timedelta(days=days_ago)
    date_str = date.strftime("%Y-%m-%dT%H:%M:%S %z")

    subprocess.run(
        ["git", "-C", str(repo), "add", *files.keys()],
        capture_output=True, check=True,
    )
    env = {
        **os.environ,
        "GIT_AUTHOR_DATE": date_str,
        "GIT_COMMITTER_DATE": date_str,
        "GIT_AUTHOR_NAME": author_name,
        "GIT_AUTHOR_EMAIL": author_email,
        "GIT_COMMITTER_NAME": author_name,
        "GIT_COMMITTER_EMAIL": author_email,
    }
    subprocess.run(
        ["git", "-C", str(repo), "commit", "-m", message],
        capture_output=True, check=True,
        env=env,
    )


def commit_file(
    repo: Path,
    file_path: str,
    content: str,
    message: str,
    days_ago: int = 0,
    author_name: str = "Test User",
    author_email: str = "test@example.com",
) -> None:
    """Create a commit touching one file at a known date."""
    commit_files(
        repo, {file_path: content}, message, days_ago=days_ago,
        author_name=author_name, author_email=author_email,
    )


@pytest.fixture
def git_repo_with_history(tmp_git_repo: Path) -> Path:
    """Create a repo with 5 commits across 3 files over 60 days."""
    commit_file(tmp_git_repo, "README.md", "# Project\n", "Initial commit", days_ago=60)
    commit_file(tmp_git_repo, "src/main.py", "print('hello')\n", "feat: add main entry point #1", days_ago=45)
    commit_file(tmp_git_repo, "src/utils.py", "def helper(): pass\n", "Add utils", days_ago=30)
    commit_file(tmp_git_repo, "src/main.py", "print('hello world')\n", "fix: greet the world", days_ago=15)
    commit_file(tmp_git_repo, "README.md", "# Project\nUpdated.\n", "Update README", days_ago=5)
    return tmp_git_repo


@pytest.fixture
def multi_author_repo(tmp_git_repo: Path) -> Path:
    """Create a repo with a backend author and a frontend author.

    Alice: 4 commits to api/ Python services and requirements.txt
    Bob:   3 commits to React components and package.json
    """
    commit_files(tmp_git_repo, {
        "api/server.py": "app = None\n",
        "requirements.txt": "fastapi\n",
    }, "feat: bootstrap api server #10", days_ago=20,
        author_name="Alice", author_email="alice@example.com")
    commit_file(tmp_git_repo, "api/routes.py", "ROUTES = []\n",
                "feat: add routes module for the api #11", days_ago=15,
                author_name="Alice", author_email="alice@example.com")
    commit_file(tmp_git_repo, "services/auth.py", "def login(): pass\n",
                "feat: add authentication service #12", days_ago=10,
                author_name="Alice", author_email="alice@example.com")
    commit_file(tmp_git_repo, "api/routes.py", "ROUTES = ['/login']\n",
                "fix: register login route", days_ago=5,
                author_name="Alice", author_email="alice@example.com")
    commit_files(tmp_git_repo, {
        "src/components/Button.jsx": "export default () => null\n",
        "package.json": "{}\n",
    }, "add button", days_ago=18,
        author_name="Bob", author_email="bob@example.com")
    commit_file(tmp_git_repo, "src/components/Nav.jsx", "export default () => null\n",
                "nav", days_ago=12,
                author_name="Bob", author_email="bob@example.com")
    commit_file(tmp_git_repo, "styles/main.css", "body {}\n",
                "styles", days_ago=2,
                author_name="Bob", author_email="bob@example.com")
    return tmp_git_repo
