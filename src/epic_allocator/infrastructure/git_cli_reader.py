import subprocess
from datetime import datetime
from pathlib import Path

from epic_allocator.domain.models import CommitRecord, FileStat

# Record/field separators keep multi-line commit bodies intact
_RS = "\x1e"
_FS = "\x1f"
_LOG_FORMAT = f"--format={_RS}%H{_FS}%aI{_FS}%aN{_FS}%aE{_FS}%B{_FS}"


class GitCliReader:
    """CommitSource backed by a local clone, read with `git log --numstat`."""

    def __init__(self, repo_path: str) -> None:
        path = Path(repo_path).resolve()
        if not (path / ".git").is_dir():
            raise ValueError(f"Not a git repository: {path}")
        self._path = str(path)

    def _run(self, *args: str) -> str:
        result = subprocess.run(
            ["git", "-C", self._path, *args],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise RuntimeError(result.stderr.strip())
        return result.stdout

    def authors(self) -> list[str]:
        """Distinct author names, most commits first."""
        try:
            output = self._run("shortlog", "-sn", "HEAD")
        except RuntimeError:
            return []
        names = []
        for line in output.splitlines():
            parts = line.strip().split("\t", 1)
            if len(parts) == 2:
                names.append(parts[1])
        return names

    def commit_records(
        self, author: str | None = None, max_count: int | None = None
    ) -> list[CommitRecord]:
        """Commits newest first, each with its per-file line counts."""
        args = ["log", "--numstat", _LOG_FORMAT]
        if author:
            args.append(f"--author={author}")
        if max_count:
            args.append(f"--max-count={max_count}")
        try:
            output = self._run(*args)
        except RuntimeError:
            return []
        if not output.strip():
            return []
        return _parse_log(output)


def _parse_log(output: str) -> list[CommitRecord]:
    records: list[CommitRecord] = []
    for chunk in output.split(_RS):
        if not chunk.strip():
            continue
        fields = chunk.split(_FS)
        if len(fields) < 6:
            continue
        sha, date_str, author_name, _author_email, body, numstat = fields[:6]
        records.append(
            CommitRecord(
                sha=sha,
                author=author_name,
                timestamp=datetime.fromisoformat(date_str),
                message=body.strip(),
                files=_parse_numstat(numstat),
            )
        )
    return records


def _parse_numstat(output: str) -> list[FileStat]:
    files: list[FileStat] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        # numstat line: <added>\t<deleted>\t<file>
        parts = line.split("\t", 2)
        if len(parts) != 3:
            continue
        added_str, deleted_str, file_path = parts
        # Binary files show "-" for added/deleted
        if added_str == "-" or deleted_str == "-":
            continue
        files.append(
            FileStat(
                filename=file_path,
                additions=int(added_str),
                deletions=int(deleted_str),
            )
        )
    return files
