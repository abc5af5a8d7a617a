"""
Builds the variable context used to interpolate compose files.
"""
import logging
import os
from typing import Dict, Mapping, Optional
from ..PARSERS.env_parser import EnvParser
from ..exceptions import NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = '.env'


class EnvironmentManager:
    """
    Merges variables from a project's .env file and the process environment.
    The process environment wins, matching Docker Compose.
    """
    def __init__(self, project_dir: str = ".", environ: Optional[Mapping[str, str]] = None):
        """
        Initializes the environment manager.

        :param project_dir: Directory holding the default .env file.
        :param environ: Process environment to overlay; defaults to os.environ.
        """
        self.project_dir = project_dir
        self.environ = dict(os.environ if environ is None else environ)

    def get_interpolation_context(self, env_file: Optional[str] = None) -> Dict[str, str]:
        """
        Returns the variables available to ${VAR} placeholders.

        :param env_file: Explicit env file. It must exist; when omitted,
            <project_dir>/.env is used if present.
        :return: A dictionary of variables.
        :raises NotFoundError: If an explicit env file does not exist.
        """
        context: Dict[str, str] = {}

        if env_file is not None:
            path = env_file if os.path.isabs(env_file) else os.path.join(self.project_dir, env_file)
            if not os.path.isfile(path):
                raise NotFoundError(path, f"Env file not found: {path}")
        else:
            path = os.path.join(self.project_dir, DEFAULT_ENV_FILE)

        if os.path.isfile(path):
            file_env = EnvParser.parse(path)
            logger.debug("Loaded %d variables from %s", len(file_env), path)
            context.update(file_env)

        context.update(self.environ)
        return context
