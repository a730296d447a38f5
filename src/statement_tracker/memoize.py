"""Reference-identity memoization for functions over transaction lists.

Results are cached per *list object*, not per list contents: calling again
with the same list and equal options returns the cached result, while a
different list (even with identical contents) is always recomputed. Callers
must pass a new list to invalidate; mutating a cached list in place is not
detected.

An entry lives exactly as long as its input. Inputs that support weak
references (such as :class:`~statement_tracker.models.TransactionList`, which
the parsers, the pipeline and the filters return) are held weakly and their
entry is dropped when they are garbage collected. Plain lists cannot be
weakly referenced, so they are held strongly until ``cache_clear()``; there
is no count-based eviction, so a live input is never recomputed.
"""

from __future__ import annotations

import functools
import json
import weakref
from collections.abc import Callable
from dataclasses import asdict, is_dataclass
from typing import Any, TypeVar

R = TypeVar("R")


def options_key(options: Any) -> str:
    """Serialize an options object into a stable cache key."""
    if options is None:
        return "{}"
    if is_dataclass(options) and not isinstance(options, type):
        options = asdict(options)
    return json.dumps(options, sort_keys=True, default=str)


class _Entry:
    """Cached results for one input collection."""

    __slots__ = ("_ref", "_strong", "results")

    def __init__(self, collection: object, on_collect: Callable[[Any], None]) -> None:
        self.results: dict[str, Any] = {}
        try:
            self._ref = weakref.ref(collection, on_collect)
            self._strong = None
        except TypeError:
            self._ref = None
            self._strong = collection

    def holds(self, collection: object) -> bool:
        target = self._ref() if self._ref is not None else self._strong
        return target is collection


def memoize_by_reference(fn: Callable[..., R]) -> Callable[..., R]:
    """Decorate ``fn(collection, options=None)`` with a per-identity cache.

    The wrapped function gains ``cache_clear()`` and ``cache_size()``
    helpers, mostly for tests.
    """
    entries: dict[int, _Entry] = {}

    @functools.wraps(fn)
    def wrapper(collection, options=None):
        ident = id(collection)
        entry = entries.get(ident)
        if entry is None or not entry.holds(collection):
            entry = _Entry(collection, functools.partial(_discard, entries, ident))
            entries[ident] = entry

        key = options_key(options)
        if key in entry.results:
            return entry.results[key]

        result = fn(collection, options) if options is not None else fn(collection)
        entry.results[key] = result
        return result

    wrapper.cache_clear = entries.clear  # type: ignore[attr-defined]
    wrapper.cache_size = entries.__len__  # type: ignore[attr-defined]
    return wrapper


def _discard(entries: dict[int, _Entry], ident: int, ref: weakref.ref) -> None:
    # The id may already belong to a newer input; only drop our own entry.
    entry = entries.get(ident)
    if entry is not None and entry._ref is ref:
        del entries[ident]
