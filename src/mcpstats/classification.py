"""Server classification from registry capability lists."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from mcpstats.models.snapshot import ServerType


def _capability(server: Any, name: str) -> Any:
    if isinstance(server, Mapping):
        return server.get(name)
    return getattr(server, name, None)


def _has_entries(value: Any) -> bool:
    if value is None or isinstance(value, (str, bytes)):
        return False
    try:
        return len(value) > 0
    except TypeError:
        return False


def classify_server(server: Any) -> ServerType:
    """Classify a registry entry by its ``packages`` and ``remotes`` lists.

    Servers shipping installable packages run locally; servers listing
    remote endpoints are hosted.  Missing, ``None`` and empty lists all
    count as absent.
    """
    has_packages = _has_entries(_capability(server, "packages"))
    has_remotes = _has_entries(_capability(server, "remotes"))

    if has_packages and has_remotes:
        return ServerType.BOTH
    if has_packages:
        return ServerType.LOCAL
    if has_remotes:
        return ServerType.REMOTE
    return ServerType.UNKNOWN


def count_server_types(servers: Iterable[Any]) -> dict[ServerType, int]:
    """Tally a registry listing by :func:`classify_server`.

    Every :class:`ServerType` is present in the result, zero-filled.
    """
    counts = dict.fromkeys(ServerType, 0)
    for server in servers:
        counts[classify_server(server)] += 1
    return counts
