# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
End-to-end resolution: file selection, loading, merging and profile filtering.
"""
import logging
import os
from typing import Iterable, List, Mapping, Optional, Sequence
from ..MANAGERS.environment_manager import EnvironmentManager
from ..MODELS.compose_document import ActiveServiceSet, ResolvedConfig
from ..PARSERS.compose_parser import ComposeParser
from .config_merger import ConfigMerger, DEFAULT_REPLACE_ONLY
from .override_resolver import OverrideResolver
from .profile_filter import ProfileFilter, ProfileRequest

logger = logging.getLogger(__name__)


class ComposeResolver:
    """
    Runs OverrideResolver -> ComposeParser -> ConfigMerger -> ProfileFilter.

    Nothing is cached: every call re-reads the files, since they may change
    between invocations. Any error aborts the whole call.
    """
    def __init__(self,
                 project_dir: Optional[str] = None,
                 env_file: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None,
                 replace_only: Iterable[str] = DEFAULT_REPLACE_ONLY,
                 strict: bool = False):
        """
        Initializes the resolver.

        :param project_dir: Directory used to find the base file and the .env
            file. Defaults to the directory of the first compose file.
        :param env_file: Explicit env file for interpolation.
        :param environ: Process environment; defaults to os.environ.
        :param replace_only: List keys replaced rather than concatenated.
        :param strict: Fail on unset interpolation variables.
        """
        self.project_dir = project_dir
        self.env_file = env_file
        self.environ = environ
        self.strict = strict
        self.override_resolver = OverrideResolver()
        self.merger = ConfigMerger(replace_only=replace_only)
        self.profile_filter = ProfileFilter()

    def resolve_files(self, base: Optional[str] = None,
                      files: Optional[Sequence[str]] = None) -> List[str]:
        """
        Returns the files a resolution would load, in order.

        :param base: Base compose file; discovered in the project directory when omitted.
        :param files: Explicit file list, used exactly as given.
        """
        if files:
            return self.override_resolver.resolve(files[0], files)
        if base is None:
            base = self.override_resolver.find_base(self.project_dir or '.')
        return self.override_resolver.resolve(base)

    def resolve_config(self, base: Optional[str] = None,
                       files: Optional[Sequence[str]] = None) -> ResolvedConfig:
        """
        Loads and merges every layer of the project.

        :param base: Base compose file.
        :param files: Explicit file list.
        :return: The merged configuration, before profile filtering.
        """
        paths = self.resolve_files(base, files)
        project_dir = self.project_dir or os.path.dirname(paths[0]) or '.'
        context = EnvironmentManager(project_dir, self.environ).get_interpolation_context(self.env_file)
        parser = ComposeParser(context=context, strict=self.strict)

        documents = ComposeParser.load_all(paths, parser)
        resolved = self.merger.merge(documents)
        logger.debug("Resolved %d services from %d files", len(resolved.services), len(paths))
        return resolved

    def resolve(self, base: Optional[str] = None,
                files: Optional[Sequence[str]] = None,
                profiles: ProfileRequest = None) -> ActiveServiceSet:
        """
        Computes the active services of a project.

        :param base: Base compose file.
        :param files: Explicit file list.
        :param profiles: Requested profile name(s), or None.
        :return: Active services mapped to their resolved configuration.
        """
        return self.profile_filter.filter(self.resolve_config(base, files), profiles)


def resolve(base: Optional[str] = None,
            files: Optional[Sequence[str]] = None,
            profiles: ProfileRequest = None,
            **kwargs) -> ActiveServiceSet:
    """
    Convenience wrapper around ComposeResolver.resolve.
    """
    return ComposeResolver(**kwargs).resolve(base=base, files=files, profiles=profiles)
