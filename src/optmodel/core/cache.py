"""Handling of cached properties whose values depend on the blocks declared in a model.
The decorator :func:`invalidate_cache` clears them whenever a method that changes the
model is invoked."""

import functools
from typing import Callable


def invalidate_cache(*properties: functools.cached_property) -> Callable:
    """Decorator that, whenever the decorated method is called, clears the cached values
    of the given properties from the instance the method is bound to.

    Parameters
    ----------
    properties : functools.cached_property
        The cached properties to be reset when the decorated method is invoked.

    Returns
    -------
    decorating_function : Callable
        Returns the function wrapped with this decorator.

    Raises
    ------
    ValueError
        Raises if no property is passed to the function.
    TypeError
        Raises if the given inputs are not instances of
        :func:`functools.cached_property`.
    """
    if not properties:
        raise ValueError("No cached properties were passed for cache invalidation.")
    for p in properties:
        if not isinstance(p, functools.cached_property):
            raise TypeError(
                f"Expected cached properties; got {p.__class__.__name__} instead."
            )

    def decorating_function(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            invalidate_caches_of(self, properties)
            return func(self, *args, **kwargs)

        return wrapper

    return decorating_function


def invalidate_caches_of(
    obj: object, properties: tuple[functools.cached_property, ...]
) -> None:
    """Clears the cached values of the given properties from ``obj``, if present."""
    cache = obj.__dict__
    for prop in properties:
        cache.pop(prop.attrname, None)
