# src/emission_lines_db/util/paths.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_data_dir

DATA_DIR_ENV = "EMISSION_LINES_DB_DATA_DIR"


@dataclass(frozen=True)
class RepoPaths:
    """
    Path policy for emission-lines-db.

    In a checkout, runtime files live under:
        <repo_root>/data/raw/emission_lines.html
        <repo_root>/data/normalized/emission_lines.ndjson
        <repo_root>/data/db/emission_lines.duckdb

    For an installed package there may be no repo root. In that case the data directory is chosen by:
      1) EMISSION_LINES_DB_DATA_DIR environment variable (points directly to the data directory)
      2) A platform-appropriate per-user data directory (via platformdirs)

    Tests commonly construct RepoPaths(repo_root=tmp_repo_root); data_dir then defaults to <repo_root>/data.
    """

    repo_root: Path
    data_root: Path | None = None
    source: str = "repo"

    @property
    def data_dir(self) -> Path:
        # If data_root is set, treat it as the *data directory itself*.
        return self.data_root if self.data_root is not None else (self.repo_root / "data")

    @property
    def raw_dir(self) -> Path:
        return self.data_dir / "raw"

    @property
    def normalized_dir(self) -> Path:
        return self.data_dir / "normalized"

    @property
    def db_dir(self) -> Path:
        return self.data_dir / "db"

    @property
    def default_source_html_path(self) -> Path:
        return self.raw_dir / "emission_lines.html"

    @property
    def default_ndjson_path(self) -> Path:
        return self.normalized_dir / "emission_lines.ndjson"

    @property
    def default_duckdb_path(self) -> Path:
        return self.db_dir / "emission_lines.duckdb"


def get_repo_root() -> Path:
    """
    Find repo root by walking upward from current working directory until pyproject.toml is found.

    If not found, returns Path.cwd().
    """
    here = Path.cwd().resolve()
    for p in [here, *here.parents]:
        if (p / "pyproject.toml").exists():
            return p
    return here


def _default_user_data_dir() -> Path:
    """Per-user data directory used when running as an installed package."""
    return Path(user_data_dir(appname="emission-lines-db", appauthor=False)).resolve()


def get_user_paths() -> RepoPaths:
    data_root = _default_user_data_dir()
    return RepoPaths(repo_root=data_root, data_root=data_root, source="user")


def get_paths() -> RepoPaths:
    """
    Return the active path policy.

    - If EMISSION_LINES_DB_DATA_DIR is set, it is interpreted as the *data directory* (the directory that contains raw/, normalized/, db/)
    - Else, if a repo root is discoverable (pyproject.toml upward from cwd), use <repo_root>/data
    - Else, use a user data directory.
    """
    env = os.environ.get(DATA_DIR_ENV)
    if env:
        data_root = Path(env).expanduser().resolve()
        # repo_root is not meaningful in this mode; keep it as data_root for debugging.
        return RepoPaths(repo_root=data_root, data_root=data_root, source="env")

    repo_root = get_repo_root()
    if (repo_root / "pyproject.toml").exists():
        return RepoPaths(repo_root=repo_root)

    return get_user_paths()
