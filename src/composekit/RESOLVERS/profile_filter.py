"""
Selection of the services that a profile request activates.
"""
import copy
import logging
from typing import Iterable, List, Optional, Tuple, Union
from ..MODELS.compose_document import ActiveServiceSet, ResolvedConfig
from ..MODELS.service_definition import ServiceDefinition

logger = logging.getLogger(__name__)

ProfileRequest = Optional[Union[str, Iterable[str]]]


class ProfileFilter:
    """
    Filters a resolved configuration down to its active services.

    A service is active if it declares no profile, or if one of its
    profiles was requested. Profiles are compared as exact strings.
    """
    def filter(self, resolved: ResolvedConfig, profile: ProfileRequest = None) -> ActiveServiceSet:
        """
        Computes the active service set.

        :param resolved: The merged configuration.
        :param profile: A profile name, several names, or None for none.
        :return: Active services mapped to their resolved configuration.
        """
        requested = self.normalize(profile)
        services = {
            service.name: copy.deepcopy(service.config)
            for service in resolved.services
            if self.is_active(service, requested)
        }
        logger.debug("Profiles %s activate %s", list(requested) or 'none', ', '.join(services) or 'nothing')
        return ActiveServiceSet(
            services=services,
            profiles=requested,
            sources=resolved.sources,
            name=resolved.name,
            networks=copy.deepcopy(resolved.networks),
            volumes=copy.deepcopy(resolved.volumes),
        )

    @staticmethod
    def is_active(service: ServiceDefinition, requested: Tuple[str, ...]) -> bool:
        if service.is_always_active():
            return True
        return any(name in service.profiles for name in requested)

    @staticmethod
    def normalize(profile: ProfileRequest) -> Tuple[str, ...]:
        """
        Turns a profile request into a tuple of unique names.
        Empty strings are dropped.
        """
        if profile is None:
            return ()
        if isinstance(profile, str):
            return (profile,) if profile else ()
        return tuple(dict.fromkeys(name for name in profile if name))

    @staticmethod
    def all_profiles(resolved: ResolvedConfig) -> List[str]:
        return resolved.profiles
