"""
Compose settings read from environment variables.
"""
import os
from typing import List, Mapping, Optional

COMPOSE_FILE = 'COMPOSE_FILE'
COMPOSE_PROFILES = 'COMPOSE_PROFILES'
COMPOSE_PATH_SEPARATOR = 'COMPOSE_PATH_SEPARATOR'


def _environ(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def files_from_env(environ: Optional[Mapping[str, str]] = None,
                   project_dir: Optional[str] = None) -> List[str]:
    """
    Returns the explicit file list named by COMPOSE_FILE.

    Entries are separated by COMPOSE_PATH_SEPARATOR, or os.pathsep when
    that is unset. Relative entries are taken relative to project_dir
    when one is given.
    """
    env = _environ(environ)
    value = env.get(COMPOSE_FILE, '')
    separator = env.get(COMPOSE_PATH_SEPARATOR) or os.pathsep
    files = [item for item in value.split(separator) if item.strip()]
    if project_dir:
        files = [os.path.join(project_dir, item) for item in files]
    return files


def profiles_from_env(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Returns the profiles named by the comma separated COMPOSE_PROFILES.
    """
    value = _environ(environ).get(COMPOSE_PROFILES, '')
    return [item.strip() for item in value.split(',') if item.strip()]
