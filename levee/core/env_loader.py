import os
from pathlib import Path
from typing import Dict, Optional, Tuple


def parse_env_line(raw_line: str) -> Optional[Tuple[str, str]]:
    """Parse ``KEY=value`` (optionally ``export``-prefixed and quoted)."""
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()

    key, _, value = line.partition("=")
    key, value = key.strip(), value.strip()
    if not key:
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return key, value


def read_env_file(path: Path) -> Dict[str, str]:
    pairs = (parse_env_line(line) for line in path.read_text(encoding="utf-8-sig").splitlines())
    return dict(pair for pair in pairs if pair is not None)


def load_project_env(override: bool = False, path: Optional[Path] = None) -> None:
    """Export LEVEE_* (and any other) settings from ``./.env`` into os.environ."""
    env_file = path or Path.cwd() / ".env"
    if not env_file.is_file():
        return

    for key, value in read_env_file(env_file).items():
        if override or key not in os.environ:
            os.environ[key] = value
