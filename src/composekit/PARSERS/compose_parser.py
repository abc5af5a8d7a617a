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
Parsers for Docker Compose YAML files.
"""
import copy
import logging
import os
import yaml
from typing import Any, Dict, List, Optional, Tuple
from ..MODELS.compose_document import ConfigDocument
from ..MODELS.service_definition import ServiceDefinition
from ..UTILS.string_interpolation import EnvironmentInterpolator, InterpolationError
from ..exceptions import NotFoundError, ParseError

logger = logging.getLogger(__name__)

# Keys whose list spelling ("KEY=VALUE") is normalised to a mapping
KEY_VALUE_KEYS = ('environment', 'labels')
DEFAULT_DEPENDENCY_CONDITION = 'service_started'
STR_TAG = 'tag:yaml.org,2002:str'
KNOWN_TOP_LEVEL = ('version', 'name', 'services', 'networks', 'volumes')


class _UniqueKeyLoader(yaml.SafeLoader):
    """
    SafeLoader that rejects repeated keys in a mapping instead of keeping
    the last one.
    """
    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == 'tag:yaml.org,2002:merge':
                continue
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError:
                # Unhashable keys are reported by the base constructor
                continue
            if duplicate:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping", node.start_mark,
                    f"found duplicate key '{key}'", key_node.start_mark)
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


class ComposeParser:
    """
    Parser for docker-compose.yml files.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None, strict: bool = False):
        """
        Initializes the parser with an optional environment context for interpolation.

        :param context: A dictionary of variables for interpolation. Defaults to os.environ.
        :param strict: Fail on unset variables instead of substituting an empty string.
        """
        self.context = dict(os.environ) if context is None else context
        self.strict = strict

    def parse(self, compose_path: str) -> ConfigDocument:
        """
        Parses a compose file from a path.

        :param compose_path: Path to the compose file.
        :return: Parsed configuration.
        :raises NotFoundError: If the file does not exist.
        :raises ParseError: If the file is malformed.
        """
        if not os.path.isfile(compose_path):
            raise NotFoundError(compose_path)
        try:
            with open(compose_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except UnicodeDecodeError as e:
            raise ParseError(f"Compose file is not valid UTF-8: {e.reason}", path=compose_path) from e
        except OSError as e:
            raise NotFoundError(compose_path, f"Compose file cannot be read: {compose_path} ({e.strerror})") from e

        logger.debug("Loading compose file %s", compose_path)
        return self.parse_from_string(content, source=compose_path)

    def parse_from_string(self, content: str, source: Optional[str] = None) -> ConfigDocument:
        """
        Parses a compose file from a string.

        :param content: YAML content of the compose file.
        :param source: Path reported in errors and stored on the document.
        :return: Parsed configuration.
        :raises ParseError: If the content is malformed.
        """
        try:
            data = self._load_yaml(content, source)
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark or e.context_mark
            problem = e.problem or str(e)
            if e.context:
                problem = f"{e.context}: {problem}"
            raise ParseError(
                f"Invalid YAML: {problem}", path=source,
                line=mark.line + 1 if mark else None,
                column=mark.column + 1 if mark else None,
            ) from e
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}", path=source) from e
        except ValueError as e:
            # e.g. an impossible date such as 2024-13-01
            raise ParseError(f"Invalid YAML value: {e}", path=source) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ParseError(f"Top-level element must be a mapping, got {type(data).__name__}", path=source)

        for key in data:
            if key not in KNOWN_TOP_LEVEL:
                logger.debug("Ignoring top-level key '%s' in %s", key, source or '<string>')

        raw_services = data.get('services')
        if raw_services is None:
            raw_services = {}
        if not isinstance(raw_services, dict):
            raise ParseError("'services' must be a mapping of service names to definitions", path=source)

        services = []
        seen = set()
        for name, spec in raw_services.items():
            name = str(name)
            if name in seen:
                raise ParseError(f"Duplicate service name '{name}'", path=source, service=name)
            seen.add(name)
            services.append(self._parse_service(name, spec, source))

        name = data.get('name')
        if name is not None and not isinstance(name, str):
            raise ParseError("'name' must be a string", path=source)

        return ConfigDocument(
            path=source,
            services=tuple(services),
            name=name,
            networks=self._section(data, 'networks', source),
            volumes=self._section(data, 'volumes', source),
        )

    def _load_yaml(self, content: str, source: Optional[str]) -> Any:
        """
        Composes the YAML node tree, interpolates variables into its string
        scalars and constructs the data. Keys and comments are left as written.
        """
        loader = _UniqueKeyLoader(content)
        try:
            node = loader.get_single_node()
            if node is None:
                return None
            self._interpolate_node(loader, node, [], source, set())
            return loader.construct_document(node)
        finally:
            loader.dispose()

    def _interpolate_node(self, loader: _UniqueKeyLoader, node: yaml.Node, keys: List[str],
                          source: Optional[str], seen: set):
        # Anchored nodes are shared; interpolating twice would expand "$$VAR"
        if id(node) in seen:
            return
        seen.add(id(node))

        if isinstance(node, yaml.MappingNode):
            for key_node, value_node in node.value:
                key = key_node.value if isinstance(key_node, yaml.ScalarNode) else '?'
                self._interpolate_node(loader, value_node, keys + [str(key)], source, seen)
        elif isinstance(node, yaml.SequenceNode):
            for index, item in enumerate(node.value):
                self._interpolate_node(loader, item, keys + [str(index)], source, seen)
        elif node.tag == STR_TAG and '$' in node.value:
            try:
                node.value = EnvironmentInterpolator.interpolate(node.value, self.context, strict=self.strict)
            except InterpolationError as e:
                service = keys[1] if len(keys) > 1 and keys[0] == 'services' else None
                raise ParseError(
                    f"{e} (at {'.'.join(keys) or 'document root'})", path=source,
                    line=node.start_mark.line + 1, column=node.start_mark.column + 1,
                    service=service,
                ) from e
            if node.style is None:
                # Unquoted values are typed after substitution, "${PORT}" -> 8080
                node.tag = loader.resolve(yaml.ScalarNode, node.value, (True, False))

    def _parse_service(self, name: str, spec: Any, source: Optional[str]) -> ServiceDefinition:
        """
        Parses a single service definition from a compose file.

        :param name: The name of the service.
        :param spec: The service specification dictionary.
        :param source: The file being parsed, for errors.
        :return: A ServiceDefinition instance.
        """
        if spec is None:
            spec = {}
        if not isinstance(spec, dict):
            raise ParseError(f"Service '{name}' must be a mapping, got {type(spec).__name__}",
                             path=source, service=name)

        for key in spec:
            if not isinstance(key, str):
                raise ParseError(f"Service '{name}' has a non-string key: {key!r}",
                                 path=source, service=name)

        config = copy.deepcopy(spec)
        profiles = self._parse_profiles(name, config.pop('profiles', None), source)

        for key in KEY_VALUE_KEYS:
            if key in config:
                config[key] = self._to_mapping(name, key, config[key], source)
        if 'depends_on' in config:
            config['depends_on'] = self._parse_depends_on(name, config['depends_on'], source)

        return ServiceDefinition(name=name, profiles=profiles, config=config)

    def _parse_profiles(self, name: str, value: Any, source: Optional[str]) -> Tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not all(isinstance(p, str) and p for p in value):
            raise ParseError(f"'profiles' of service '{name}' must be a list of non-empty strings",
                             path=source, service=name)
        return tuple(value)

    def _to_mapping(self, name: str, key: str, value: Any, source: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Converts the ["KEY=VALUE", "KEY"] spelling of a key into a mapping.
        A bare "KEY" maps to None.
        """
        if value is None or isinstance(value, dict):
            return value
        if isinstance(value, list):
            result: Dict[str, Any] = {}
            for item in value:
                if not isinstance(item, str):
                    raise ParseError(f"'{key}' entries of service '{name}' must be strings",
                                     path=source, service=name)
                if '=' in item:
                    k, v = item.split('=', 1)
                    result[k] = v
                else:
                    result[item] = None
            return result
        raise ParseError(f"'{key}' of service '{name}' must be a mapping or a list",
                         path=source, service=name)

    def _parse_depends_on(self, name: str, value: Any, source: Optional[str]) -> Optional[Dict[str, Any]]:
        if value is None or isinstance(value, dict):
            return value
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list) and all(isinstance(dep, str) for dep in value):
            return {dep: {'condition': DEFAULT_DEPENDENCY_CONDITION} for dep in value}
        raise ParseError(f"'depends_on' of service '{name}' must be a list of names or a mapping",
                         path=source, service=name)

    def _section(self, data: Dict[str, Any], key: str, source: Optional[str]) -> Dict[str, Any]:
        value = data.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict) or not all(isinstance(k, str) for k in value):
            raise ParseError(f"'{key}' must be a mapping of names", path=source)
        return copy.deepcopy(value)

    @staticmethod
    def load_all(paths: List[str], parser: Optional['ComposeParser'] = None) -> List[ConfigDocument]:
        """
        Parses each file in order.

        :param paths: Compose file paths.
        :param parser: Parser to use; a default one is created when omitted.
        :return: One document per path, in the same order.
        """
        parser = parser or ComposeParser()
        return [parser.parse(path) for path in paths]
