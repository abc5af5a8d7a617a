"""
Read-only dict and list types for configuration parsed from compose files.
"""
from typing import Any


def _read_only(self, *args, **kwargs):
    raise TypeError(f"{type(self).__name__} is read-only; deep-copy it to get a mutable copy")


class FrozenDict(dict):
    """
    A dict that rejects modification. ``copy.deepcopy`` returns a plain,
    mutable dict, so callers that need to edit a configuration copy it first.
    """
    __setitem__ = __delitem__ = __ior__ = _read_only
    clear = pop = popitem = setdefault = update = _read_only

    def __copy__(self):
        return dict(self)

    def __deepcopy__(self, memo):
        return thaw(self)

    def __reduce__(self):
        return (FrozenDict, (dict(self),))


class FrozenList(list):
    """
    A list that rejects modification. Deep copies are plain lists.
    """
    __setitem__ = __delitem__ = __iadd__ = __imul__ = _read_only
    append = extend = insert = pop = remove = clear = sort = reverse = _read_only

    def __copy__(self):
        return list(self)

    def __deepcopy__(self, memo):
        return thaw(self)

    def __reduce__(self):
        return (FrozenList, (list(self),))


def freeze(value: Any) -> Any:
    """
    Recursively converts dicts and lists into their read-only counterparts.
    Other values are returned unchanged.
    """
    if isinstance(value, FrozenDict) or isinstance(value, FrozenList):
        return value
    if isinstance(value, dict):
        return FrozenDict((key, freeze(item)) for key, item in value.items())
    if isinstance(value, list):
        return FrozenList(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """
    Returns a deep, mutable copy of a frozen (or plain) configuration value.
    """
    if isinstance(value, dict):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, list):
        return [thaw(item) for item in value]
    return value
