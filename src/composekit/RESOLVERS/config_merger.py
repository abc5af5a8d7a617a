"""
Layered merging of compose documents.
"""
import copy
import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence
from ..MODELS.compose_document import ConfigDocument, ResolvedConfig
from ..MODELS.service_definition import ServiceDefinition
from ..exceptions import MergeConflictError

logger = logging.getLogger(__name__)

# argv vectors: concatenating two commands never yields a valid command
DEFAULT_REPLACE_ONLY: FrozenSet[str] = frozenset({'command', 'entrypoint', 'healthcheck.test'})


class ConfigMerger:
    """
    Merges compose documents in the order given.

    Merge rules, applied recursively to every key of a service:
    - Scalars: the later value replaces the earlier one
    - Lists: concatenated, earlier items first, unless the key is replace-only
    - Mappings: merged key by key with the same rules
    - None: a later None resets the key
    - Anything else (list over scalar, mapping over list...): MergeConflictError

    Example:
        base     = {"ports": ["5432:5432"], "environment": {"A": "1"}}
        override = {"ports": ["5433:5432"], "environment": {"A": "2", "B": "3"}}
        result   = {"ports": ["5432:5432", "5433:5432"], "environment": {"A": "2", "B": "3"}}
    """
    def __init__(self, replace_only: Iterable[str] = DEFAULT_REPLACE_ONLY):
        """
        Initializes the merger.

        :param replace_only: List-valued keys whose later value replaces the
            earlier one. A plain name matches that key at any depth; a dotted
            path such as "healthcheck.test" matches only that key path.
        """
        self.replace_only = frozenset(replace_only)

    def merge(self, documents: Sequence[ConfigDocument]) -> ResolvedConfig:
        """
        Merges documents in order into one resolved configuration.

        :param documents: Parsed documents, base first.
        :return: The resolved configuration.
        :raises MergeConflictError: If two layers give incompatible shapes to a key.
        """
        profiles: Dict[str, List[str]] = {}
        configs: Dict[str, Dict[str, Any]] = {}
        networks: Dict[str, Any] = {}
        volumes: Dict[str, Any] = {}
        name: Optional[str] = None
        sources: List[str] = []

        for document in documents:
            logger.debug("Merging %d services from %s", len(document.services), document.path or '<string>')
            for service in document.services:
                if service.name not in configs:
                    configs[service.name] = copy.deepcopy(service.config)
                    profiles[service.name] = list(service.profiles)
                    continue
                configs[service.name] = self.merge_mappings(
                    configs[service.name], service.config,
                    path=document.path, service=service.name,
                )
                for profile in service.profiles:
                    if profile not in profiles[service.name]:
                        profiles[service.name].append(profile)

            networks = self.merge_mappings(networks, document.networks, path=document.path, prefix='networks')
            volumes = self.merge_mappings(volumes, document.volumes, path=document.path, prefix='volumes')
            if document.name is not None:
                name = document.name
            if document.path:
                sources.append(document.path)

        services = tuple(
            ServiceDefinition(name=svc_name, profiles=tuple(profiles[svc_name]), config=config)
            for svc_name, config in configs.items()
        )
        return ResolvedConfig(
            path=sources[-1] if sources else None,
            services=services,
            name=name,
            networks=networks,
            volumes=volumes,
            sources=tuple(sources),
        )

    def merge_mappings(self, base: Dict[str, Any], override: Dict[str, Any],
                       path: Optional[str] = None, service: Optional[str] = None,
                       prefix: str = '') -> Dict[str, Any]:
        """
        Deep merges override into base.

        :param base: Lower priority mapping.
        :param override: Higher priority mapping.
        :param path: File the override came from, for errors.
        :param service: Service being merged, for errors.
        :param prefix: Dotted key path of the mappings, for errors.
        :return: A new mapping; inputs are not modified.
        """
        result = copy.deepcopy(base)
        for key, incoming in override.items():
            key_path = f"{prefix}.{key}" if prefix else str(key)
            if key not in result:
                result[key] = copy.deepcopy(incoming)
            else:
                result[key] = self._merge_value(key, result[key], incoming, path, service, key_path)
        return result

    def _merge_value(self, key: Any, existing: Any, incoming: Any,
                     path: Optional[str], service: Optional[str], key_path: str) -> Any:
        if incoming is None:
            return None
        if existing is None:
            return copy.deepcopy(incoming)

        if isinstance(existing, dict) and isinstance(incoming, dict):
            return self.merge_mappings(existing, incoming, path=path, service=service, prefix=key_path)

        if isinstance(existing, list) and isinstance(incoming, list):
            if key in self.replace_only or key_path in self.replace_only:
                return copy.deepcopy(incoming)
            return existing + copy.deepcopy(incoming)

        if _is_scalar(existing) and _is_scalar(incoming):
            return incoming

        raise MergeConflictError(path, service, key_path, existing, incoming)


def _is_scalar(value: Any) -> bool:
    return not isinstance(value, (dict, list))
