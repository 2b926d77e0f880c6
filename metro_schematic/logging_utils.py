"""DEBUG call tracing for the geometry and layout modules.

Arguments and results are summarised: graphs and render models by the sizes
of their collections, 2-vectors as ``point(x, y)``.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, Mapping, MutableMapping, Optional, Sequence, Set, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_WRAPPED_FLAG = "_debug_logging_wrapped"

_short = reprlib.Repr()
_short.maxstring = 80
_short.maxother = 120

# fields of graphs and render models that are summarised by their length
_SIZED_FIELDS = (
    "platforms",
    "stations",
    "spans",
    "transfers",
    "routes",
    "markers",
    "hit_regions",
    "curves",
    "clusters",
    "transfer_lines",
)


def _number(value: float) -> str:
    return f"{float(value):.6g}"


def _summarize_array(value: np.ndarray, limit: int) -> str:
    if value.shape == (2,):
        return f"point({_number(value[0])}, {_number(value[1])})"
    if value.size == 0:
        return f"ndarray(shape={tuple(value.shape)})"
    if value.size <= limit:
        return "ndarray(" + ", ".join(_number(v) for v in value.ravel()) + ")"
    return f"ndarray(shape={tuple(value.shape)}, min={_number(value.min())}, max={_number(value.max())})"


def _summarize_entity(value: Any) -> Optional[str]:
    sized = [
        f"{name}={len(getattr(value, name))}"
        for name in _SIZED_FIELDS
        if isinstance(getattr(value, name, None), (list, tuple, dict))
    ]
    if not sized:
        return None
    return f"{type(value).__name__}({', '.join(sized)})"


def _summarize_items(rendered: Iterable[str], total: int, limit: int) -> str:
    items = list(rendered)
    if total > limit:
        items.append(f"... ({total} total)")
    return ", ".join(items)


def _safe_repr(value: Any, *, limit: int = 5) -> str:
    """Short, bounded description of ``value`` for trace lines."""

    if isinstance(value, np.ndarray):
        return _summarize_array(value, limit)

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        summary = _summarize_entity(value)
        if summary is not None:
            return summary

    if isinstance(value, Mapping):
        pairs = (f"{_safe_repr(k)}: {_safe_repr(v)}" for k, v in list(value.items())[:limit])
        return "{" + _summarize_items(pairs, len(value), limit) + "}"

    if isinstance(value, (list, tuple, set, frozenset)):
        ordered = list(value)
        body = _summarize_items((_safe_repr(item) for item in ordered[:limit]), len(ordered), limit)
        if isinstance(value, tuple):
            return f"({body})"
        if isinstance(value, (set, frozenset)):
            return "{" + body + "}"
        return f"[{body}]"

    try:
        return _short.repr(value)
    except Exception as exc:  # pragma: no cover - repr of foreign objects
        return f"<unrepresentable {type(value).__name__}: {exc!r}>"


def _describe_call(args: Sequence[Any], kwargs: Mapping[str, Any]) -> str:
    described = [_safe_repr(arg) for arg in args]
    described.extend(f"{key}={_safe_repr(value)}" for key, value in kwargs.items())
    return ", ".join(described)


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Decorator tracing entry, result and failure of a call at DEBUG level."""

    def decorator(func: F) -> F:
        if getattr(func, _WRAPPED_FLAG, False):
            return func
        label = name or func.__qualname__

        @wraps(func)
        def traced(*args: Any, **kwargs: Any) -> Any:
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("call %s(%s)", label, _describe_call(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                logger.debug("%s raised %s: %s", label, type(exc).__name__, exc)
                raise
            if log_result:
                logger.debug("%s returned %s", label, _safe_repr(result))
            return result

        setattr(traced, _WRAPPED_FLAG, True)
        return cast(F, traced)

    return decorator


def _wrap_member(cls: type, attr: str, member: Any, logger: logging.Logger) -> None:
    label = f"{cls.__name__}.{attr}"
    if isinstance(member, (staticmethod, classmethod)):
        func = member.__func__
        if func.__module__ == cls.__module__:
            setattr(cls, attr, type(member)(debug_log_call(logger, name=label)(func)))
    elif inspect.isfunction(member) and member.__module__ == cls.__module__:
        setattr(cls, attr, debug_log_call(logger, name=label)(member))


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
    wrap_methods: bool = True,
) -> None:
    """Trace the public functions (and class methods) defined in a module.

    Call as ``apply_debug_logging(globals(), logger=logger)`` at the end of a
    module. Underscore names and exception classes are left alone.
    """

    module_name = namespace.get("__name__")
    logger = logger or logging.getLogger(str(module_name))
    excluded: Set[str] = set(skip or ())

    for name, value in list(namespace.items()):
        if name.startswith("_") or name in excluded:
            continue
        if getattr(value, "__module__", None) != module_name:
            continue
        if inspect.isfunction(value):
            namespace[name] = debug_log_call(logger, name=name)(value)
        elif wrap_methods and inspect.isclass(value) and not issubclass(value, BaseException):
            for attr, member in list(vars(value).items()):
                if attr.startswith("_") or attr in excluded or f"{name}.{attr}" in excluded:
                    continue
                _wrap_member(value, attr, member, logger)

    logger.debug("Call tracing installed for %s", module_name)
