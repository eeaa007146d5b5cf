from collections import defaultdict
from functools import wraps


class Cacheable:
    """Mixin providing the per-instance storage used by :func:`cache`."""

    def __new__(cls, *_args, **_kwargs):
        obj = object.__new__(cls)
        obj._cache = defaultdict(dict)
        return obj


def cache(num_args=1):
    """
    Decorator to memoize a method of a :class:`Cacheable` using its first
    ``num_args`` positional arguments as the key.

    Values are cached per instance, so each opened workbook reads each part
    at most once.
    """

    def cache_decorator(func):
        method = func.__name__

        @wraps(func)
        def inner_multi_args(self, *args, **kwargs):
            key = tuple(args[:num_args])
            if key in self._cache[method]:
                return self._cache[method][key]
            value = func(self, *args, **kwargs)
            self._cache[method][key] = value
            return value

        @wraps(func)
        def inner_no_args(self):
            if method not in self._cache:
                self._cache[method] = func(self)
            return self._cache[method]

        if num_args == 0:
            return inner_no_args
        return inner_multi_args

    return cache_decorator
