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
Errors raised while resolving a compose project.

Every error is terminal for the resolution call that raised it and carries
the offending file path plus whatever location detail is known (line and
column, service name, dotted key path).
"""
from typing import Any, Dict, List, Optional


class ComposeError(Exception):
    """
    Base class for all resolution errors.

    :param message: Human-readable error message.
    :param path: Path of the compose file the error relates to.
    :param details: Additional context, included in ``to_dict``.
    """
    def __init__(self, message: str, path: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.path = path
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"file: {self.path}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "path": self.path,
            "details": self.details,
        }


class NotFoundError(ComposeError):
    """A compose file does not exist."""
    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(message or f"Compose file not found: {path}", path=path)


class ParseError(ComposeError):
    """
    A compose file is malformed.

    ``line`` and ``column`` are 1-based when known.
    """
    def __init__(self, message: str, path: Optional[str] = None,
                 line: Optional[int] = None, column: Optional[int] = None,
                 service: Optional[str] = None):
        self.line = line
        self.column = column
        self.service = service
        details = {}
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column
        if service is not None:
            details["service"] = service
        super().__init__(message, path=path, details=details)

    @property
    def location(self) -> Optional[str]:
        if self.line is None:
            return None
        if self.column is None:
            return f"line {self.line}"
        return f"line {self.line}, column {self.column}"

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"file: {self.path}")
        if self.location:
            parts.append(self.location)
        return " | ".join(parts)


class MergeConflictError(ComposeError):
    """
    Two layers give incompatible shapes to the same key, e.g. a list in the
    base file and a plain string in an override.
    """
    def __init__(self, path: Optional[str], service: Optional[str], key: str,
                 existing: Any, incoming: Any):
        self.service = service
        self.key = key
        self.existing_type = _shape(existing)
        self.incoming_type = _shape(incoming)
        owner = f"service '{service}'" if service else "top-level section"
        message = (
            f"Cannot merge key '{key}' of {owner}: "
            f"{self.existing_type} cannot be combined with {self.incoming_type}"
        )
        super().__init__(message, path=path, details={
            "service": service,
            "key": key,
            "existing": self.existing_type,
            "incoming": self.incoming_type,
        })

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"file: {self.path}")
        return " | ".join(parts)


class DependencyCycleError(ComposeError):
    """Active services depend on each other in a loop."""
    def __init__(self, cycle: List[str]):
        self.cycle = list(cycle)
        super().__init__(
            f"Circular dependency detected: {' -> '.join(self.cycle)}",
            details={"cycle": self.cycle},
        )


def _shape(value: Any) -> str:
    if isinstance(value, dict):
        return "mapping"
    if isinstance(value, list):
        return "list"
    return "scalar"
