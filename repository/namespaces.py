# repository/namespaces.py
from typing import Final
from util.functions import escape_glob

ROOT: Final[str] = "mediadock"

CATEGORIES: Final[str] = f"{ROOT}:categories"
PROGRESS: Final[str] = f"{ROOT}:progress"  # per-subject, {PROGRESS}:{subject}:...
STATS: Final[str] = f"{ROOT}:stats"  # per-asset aggregates


def progress_prefix(subject_id: str) -> str:
    return f"{PROGRESS}:{subject_id}"


def progress_pattern(subject_id: str) -> str:
    # Subject ids are opaque; glob characters in them must match literally
    return f"{PROGRESS}:{escape_glob(subject_id)}:*"


def stats_key(asset_id: str) -> str:
    return f"{STATS}:{asset_id}"
