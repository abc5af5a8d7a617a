"""
Models for parsed, merged and filtered compose configurations.
"""
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from .frozen import freeze
from .service_definition import ServiceDefinition


class ConfigDocument(BaseModel):
    """
    The services of one compose file, in declaration order.
    Equivalent to a parsed docker-compose.yml file.
    """
    model_config = ConfigDict(frozen=True, validate_default=True)

    path: Optional[str] = None
    services: Tuple[ServiceDefinition, ...] = ()
    name: Optional[str] = None
    networks: Dict[str, Any] = {}
    volumes: Dict[str, Any] = {}

    @field_validator('networks', 'volumes')
    @classmethod
    def _freeze_sections(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        return freeze(value)

    @model_validator(mode='after')
    def _unique_service_names(self) -> 'ConfigDocument':
        seen = set()
        for service in self.services:
            if service.name in seen:
                raise ValueError(f"duplicate service name '{service.name}'")
            seen.add(service.name)
        return self

    @property
    def service_names(self) -> List[str]:
        return [service.name for service in self.services]

    def get(self, name: str) -> Optional[ServiceDefinition]:
        """
        Looks up a service by name.

        :param name: The service name.
        :return: The service, or None if it is not declared.
        """
        for service in self.services:
            if service.name == name:
                return service
        return None

    def __contains__(self, name: object) -> bool:
        return any(service.name == name for service in self.services)


class ResolvedConfig(ConfigDocument):
    """
    The single document obtained by merging every layer in order.
    ``sources`` lists the files it was built from, first to last.
    """
    sources: Tuple[str, ...] = ()

    @property
    def profiles(self) -> List[str]:
        """Every profile declared by any service, sorted."""
        names = set()
        for service in self.services:
            names.update(service.profiles)
        return sorted(names)


class ActiveServiceSet(BaseModel):
    """
    The services selected by a profile filter, mapped to their fully
    resolved configuration. This is what a container runtime consumes.
    """
    model_config = ConfigDict(frozen=True)

    services: Dict[str, Dict[str, Any]] = {}
    profiles: Tuple[str, ...] = ()
    sources: Tuple[str, ...] = ()
    name: Optional[str] = None
    networks: Dict[str, Any] = {}
    volumes: Dict[str, Any] = {}

    @property
    def names(self) -> List[str]:
        return list(self.services.keys())

    def __contains__(self, name: object) -> bool:
        return name in self.services

    def __getitem__(self, name: str) -> Dict[str, Any]:
        return self.services[name]

    def __len__(self) -> int:
        return len(self.services)

    def to_compose(self) -> Dict[str, Any]:
        """
        Renders the set back into a compose-shaped mapping, the way
        ``docker compose config`` prints it.
        """
        data: Dict[str, Any] = {}
        if self.name:
            data['name'] = self.name
        data['services'] = {name: dict(cfg) for name, cfg in self.services.items()}
        if self.networks:
            data['networks'] = dict(self.networks)
        if self.volumes:
            data['volumes'] = dict(self.volumes)
        return data
