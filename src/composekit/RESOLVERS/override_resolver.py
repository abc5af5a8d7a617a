"""
Selection of the compose files to load for a project.
"""
import logging
import os
from typing import List, Optional, Sequence
from ..exceptions import NotFoundError

logger = logging.getLogger(__name__)

# Searched in order when no base file is named
DEFAULT_BASE_NAMES = ('compose.yaml', 'compose.yml', 'docker-compose.yaml', 'docker-compose.yml')
OVERRIDE_SUFFIX = '.override'


class OverrideResolver:
    """
    Decides which files make up a project.

    An explicit file list is used exactly as given. Without one, the base
    file is loaded followed by its override file when that exists next to
    it: docker-compose.yml pairs with docker-compose.override.yml.
    """
    def resolve(self, base: str, explicit_files: Optional[Sequence[str]] = None) -> List[str]:
        """
        Returns the ordered list of files to load.

        :param base: Path of the base compose file.
        :param explicit_files: Files named by the caller; when non-empty
            they are returned unchanged and the disk is not consulted.
        :return: File paths, base first.
        """
        if explicit_files:
            files = list(explicit_files)
            logger.debug("Using explicit compose files: %s", ', '.join(files))
            return files

        files = [base]
        override = self.override_path(base)
        if os.path.isfile(override):
            logger.debug("Found override file %s", override)
            files.append(override)
        return files

    @staticmethod
    def override_path(base: str) -> str:
        """
        Returns the override file name that pairs with a base file.

        :param base: Path of the base compose file.
        :return: <dir>/<stem>.override<ext>
        """
        directory, filename = os.path.split(base)
        stem, ext = os.path.splitext(filename)
        return os.path.join(directory, f"{stem}{OVERRIDE_SUFFIX}{ext}")

    @staticmethod
    def find_base(project_dir: str = ".") -> str:
        """
        Locates the base compose file of a project directory.

        :param project_dir: Directory to search.
        :return: Path of the first default-named file found.
        :raises NotFoundError: If none of the default names exists.
        """
        for name in DEFAULT_BASE_NAMES:
            candidate = os.path.join(project_dir, name)
            if os.path.isfile(candidate):
                return candidate
        raise NotFoundError(
            project_dir,
            f"No compose file found in {project_dir} (looked for {', '.join(DEFAULT_BASE_NAMES)})",
        )
