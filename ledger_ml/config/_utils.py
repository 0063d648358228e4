import os
from pathlib import Path

ENV_FILE_VAR = "LEDGER_ML_ENV_FILE"

# Looked up under <project root>/config, first match wins
ENV_FILE_CANDIDATES = (".env.ml.dev", ".env.ml", ".env")


def _find_project_root() -> Path:
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "pyproject.toml").is_file() or parent == Path("/app"):
            return parent
    return here.parents[2]


def resolve_env_file_path() -> Path | None:
    """Locate the env file for the classification service.

    `LEDGER_ML_ENV_FILE` wins when it points at an existing file (relative
    paths are taken from the project root); otherwise the first of
    `ENV_FILE_CANDIDATES` found in `config/`. None when nothing exists, in
    which case only the process environment is read.
    """
    root = _find_project_root()

    explicit = os.environ.get(ENV_FILE_VAR)
    if explicit:
        path = Path(explicit)
        path = path if path.is_absolute() else root / path
        if path.is_file():
            return path

    for name in ENV_FILE_CANDIDATES:
        candidate = root / "config" / name
        if candidate.is_file():
            return candidate
    return None
