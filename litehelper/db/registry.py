# litehelper/db/registry.py
"""
Helper registry: one OpenHelper per database identity.

The identity is the resolved file path (folder + name). Two helpers on the
same file would each hold their own lock and could migrate concurrently;
going through get_helper rules that out within one process.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, TypeVar, Union

from litehelper.db.open_helper import OpenHelper
from litehelper.utils.paths import resolve_database_path

_log = logging.getLogger("litehelper.db.registry")

H = TypeVar("H", bound=OpenHelper)

_helpers: dict[Path, OpenHelper] = {}
_lock = threading.Lock()


def get_helper(
    factory: Callable[..., H],
    folder: Union[str, Path],
    name: str,
    *args: Any,
    **kwargs: Any,
) -> H:
    """
    Return the helper registered for folder/name, creating it with
    factory(name, *args, folder=folder, **kwargs) on first request.
    Raises TypeError if the registered helper is not of the factory's type.
    """
    key = resolve_database_path(Path(folder), name)
    with _lock:
        helper = _helpers.get(key)
        if helper is None:
            helper = factory(name, *args, folder=folder, **kwargs)
            _helpers[key] = helper
            _log.debug("helper registered: %s", key)
        elif isinstance(factory, type) and not isinstance(helper, factory):
            raise TypeError(
                f"{key} is already managed by {type(helper).__name__}, not {factory.__name__}"
            )
        return helper


def release_helper(folder: Union[str, Path], name: str) -> None:
    """Close and forget the helper for folder/name, if registered."""
    key = resolve_database_path(Path(folder), name)
    with _lock:
        helper = _helpers.pop(key, None)
    if helper is not None:
        helper.close()


def clear_helpers() -> None:
    """Close and forget every registered helper."""
    with _lock:
        helpers = list(_helpers.values())
        _helpers.clear()
    for helper in helpers:
        helper.close()
