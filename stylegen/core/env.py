"""Generator configuration from the environment and .env files.

Load order (first wins):
  1. Existing OS environment variables, never overwritten.
  2. .env file at --env-file path (if explicitly provided).
  3. .env file walking up from cwd, stopping at .git (file or dir).

Recognised keys:
  STYLEGEN_OUT_DIR      directory for generated .h/.cpp files (default: cwd)
  STYLEGEN_ICONS_ROOT   base directory for relative icon paths
  STYLEGEN_PROJECT      generator name stamped into file banners
  STYLEGEN_SAMPLE_THEME path of the sample theme written for palette modules
"""

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = 'STYLEGEN_'


@dataclass
class GeneratorConfig:
    out_dir: str = '.'
    icons_root: str | None = None
    project: str = 'stylegen'
    sample_theme: str | None = None
    env_path: Path | None = None  # .env file that was loaded, if any


def _find_dotenv(start: Path) -> Path | None:
    """Walk up from start, return first .env found, stop at .git boundary."""
    current = start.resolve()
    while True:
        candidate = current / '.env'
        if candidate.is_file():
            return candidate
        if (current / '.git').exists():
            return None
        if current.parent == current:
            return None
        current = current.parent


def _parse_dotenv(path: Path) -> dict[str, str]:
    """Parse KEY=value / KEY="value" lines; blanks and # comments are skipped."""
    result: dict[str, str] = {}
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, _, raw_value = line.partition('=')
        key = key.strip()
        if key:
            result[key] = raw_value.strip().strip('"').strip("'")
    return result


def load_env(env_file: str | None = None) -> Path | None:
    """Load .env into os.environ for keys not already set.

    Returns the path that was loaded, or None if no .env was found/used.
    """
    if env_file:
        path = Path(env_file)
        if not path.is_file():
            return None
    else:
        path = _find_dotenv(Path.cwd())
        if path is None:
            return None

    for key, value in _parse_dotenv(path).items():
        os.environ.setdefault(key, value)
    return path


def load_config(env_file: str | None = None, **overrides: str | None) -> GeneratorConfig:
    """Build the generator config; explicit (CLI) overrides beat the environment."""
    env_path = load_env(env_file)
    config = GeneratorConfig(env_path=env_path)
    for name in ('out_dir', 'icons_root', 'project', 'sample_theme'):
        value = overrides.get(name) or os.environ.get(ENV_PREFIX + name.upper())
        if value:
            setattr(config, name, value)
    return config
