"""
Model for a single service as declared in one compose file.
"""
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, field_validator
from .frozen import freeze


class ServiceDefinition(BaseModel):
    """
    A named service, the profiles it is declared under and its raw
    configuration mapping (image, ports, volumes, environment, depends_on...).

    A service with no profiles is always active. The configuration is
    read-only once the model is built.
    """
    model_config = ConfigDict(frozen=True, validate_default=True)

    name: str
    profiles: Tuple[str, ...] = ()
    config: Dict[str, Any] = {}

    @field_validator('profiles')
    @classmethod
    def _unique_profiles(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        # Keep declaration order, drop repeats
        return tuple(dict.fromkeys(value))

    @field_validator('config')
    @classmethod
    def _freeze_config(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        return freeze(value)

    @property
    def image(self) -> Optional[str]:
        return self.config.get('image')

    @property
    def ports(self) -> List[Any]:
        return list(self.config.get('ports') or [])

    @property
    def depends_on(self) -> List[str]:
        """Names of the services this one depends on."""
        deps = self.config.get('depends_on') or {}
        if isinstance(deps, dict):
            return list(deps.keys())
        return list(deps)

    def is_always_active(self) -> bool:
        return not self.profiles
