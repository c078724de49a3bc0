"""Reference-graph checks over synthesized policy groups."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from clashforge.groups.models import SENTINELS, PolicyGroup


class GroupGraphError(ValueError):
    """A group references a missing name or participates in a cycle."""


def validate_group_graph(
    groups: Iterable[PolicyGroup],
    endpoint_names: Collection[str],
) -> None:
    """Raise if any member is dangling or the group graph is cyclic.

    A member resolves to a group when a group of that name exists, otherwise
    it must be an endpoint name or an engine sentinel such as ``DIRECT``.
    """
    by_name: dict[str, PolicyGroup] = {}
    for group in groups:
        if group.name in by_name:
            raise GroupGraphError(f"Duplicate policy group name: {group.name}")
        by_name[group.name] = group

    known = set(endpoint_names) | SENTINELS
    for group in by_name.values():
        for member in group.members:
            if member not in by_name and member not in known:
                raise GroupGraphError(
                    f"Group {group.name!r} references unknown member {member!r}"
                )

    # Iterative DFS with three colours: absent = unvisited, 1 = on stack, 2 = done.
    state: dict[str, int] = {}
    for root in by_name:
        if root in state:
            continue
        stack: list[tuple[str, int]] = [(root, 0)]
        path: list[str] = [root]
        state[root] = 1
        while stack:
            name, idx = stack[-1]
            children = [m for m in by_name[name].members if m in by_name]
            if idx < len(children):
                stack[-1] = (name, idx + 1)
                child = children[idx]
                if state.get(child) == 1:
                    cycle = path[path.index(child) :] + [child]
                    raise GroupGraphError(
                        "Circular group reference detected: " + " -> ".join(cycle)
                    )
                if child not in state:
                    state[child] = 1
                    stack.append((child, 0))
                    path.append(child)
            else:
                state[name] = 2
                stack.pop()
                path.pop()
