from __future__ import annotations

from collections import deque
from typing import Any, cast

VIDEO_RENDERER_KEY = "videoRenderer"


def collect_renderers(
    root: Any,
    *,
    marker: str = VIDEO_RENDERER_KEY,
    max_nodes: int | None = None,
) -> list[dict[str, Any]]:
    """
    Breadth-first walk over a parsed JSON tree collecting every `marker` record.

    A container reachable through several parents is visited once. `max_nodes`
    caps the number of distinct containers inspected; `None` walks everything.
    Results keep discovery order.
    """
    renderers: list[dict[str, Any]] = []
    queue: deque[Any] = deque([root])
    visited: set[int] = set()

    while queue:
        node = queue.popleft()
        if not isinstance(node, dict | list):
            continue
        node_id = id(node)
        if node_id in visited:
            continue
        if max_nodes is not None and len(visited) >= max_nodes:
            break
        visited.add(node_id)

        if isinstance(node, dict):
            record = cast(dict[Any, Any], node)
            renderer = record.get(marker)
            if isinstance(renderer, dict):
                renderers.append(cast(dict[str, Any], renderer))
            children: list[Any] = list(record.values())
        else:
            children = cast(list[Any], node)

        queue.extend(child for child in children if isinstance(child, dict | list))

    return renderers
