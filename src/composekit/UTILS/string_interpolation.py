"""
Utilities for string interpolation using environment variables.
"""
import logging
import re
from typing import Dict

logger = logging.getLogger(__name__)

_NAME = r'[A-Za-z_][A-Za-z0-9_]*'
_PATTERN = re.compile(r'\$(?:(?P<escaped>\$)|\{(?P<braced>[^}]*)\}|(?P<named>' + _NAME + r'))')
_BRACED = re.compile(r'^(?P<name>' + _NAME + r')(?:(?P<op>:-|-|:\+|\+|:\?|\?)(?P<arg>.*))?$', re.DOTALL)


class InterpolationError(ValueError):
    """
    A placeholder is malformed or a required variable is missing.

    :param message: Description of the problem.
    :param position: Offset of the offending placeholder in the template.
    """
    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(message)


class EnvironmentInterpolator:
    """
    Utility for interpolating environment variables in strings.
    Supports $VAR, ${VAR}, ${VAR:-default}, ${VAR-default}, ${VAR:+value},
    ${VAR+value}, ${VAR:?error}, ${VAR?error} and the $$ escape.
    """
    @staticmethod
    def interpolate(template: str, context: Dict[str, str], strict: bool = False) -> str:
        """
        Interpolates environment variables in the template string using the provided context.

        The colon forms treat an empty variable like an unset one; the plain
        forms only look at whether the variable is set.

        :param template: The string containing placeholders.
        :param context: The environment variables context.
        :param strict: Raise instead of substituting an empty string for unset variables.
        :return: The interpolated string.
        :raises InterpolationError: On a malformed placeholder, on ${VAR:?err}
            with VAR unset, or on any unset variable when strict.
        """
        def replace(match):
            """
            Internal replacement function for re.sub.
            """
            if match.group('escaped'):
                return '$'
            if match.group('named'):
                return _lookup(match.group('named'), match.start())

            body = match.group('braced')
            parsed = _BRACED.match(body)
            if not parsed:
                raise InterpolationError(f"Invalid interpolation format: ${{{body}}}", match.start())

            var_name = parsed.group('name')
            op = parsed.group('op')
            arg = parsed.group('arg') or ''
            value = context.get(var_name)
            is_set = value is not None
            is_filled = bool(value)

            if op is None:
                return _lookup(var_name, match.start())
            if op == ':-':
                return value if is_filled else arg
            if op == '-':
                return value if is_set else arg
            if op == ':+':
                return arg if is_filled else ''
            if op == '+':
                return arg if is_set else ''
            # ':?' and '?'
            ok = is_filled if op == ':?' else is_set
            if not ok:
                reason = arg or f"variable {var_name} is required"
                raise InterpolationError(f"Required variable {var_name} is missing: {reason}", match.start())
            return value

        def _lookup(var_name: str, position: int) -> str:
            value = context.get(var_name)
            if value is not None:
                return value
            if strict:
                raise InterpolationError(f"Variable {var_name} not found in context", position)
            logger.warning("The %s variable is not set. Defaulting to a blank string.", var_name)
            return ''

        return _PATTERN.sub(replace, template)

