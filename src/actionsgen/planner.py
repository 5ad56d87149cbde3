# planner.py
from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from .model import Target


def build_graph(targets: Sequence[Target]) -> Tuple[Dict[str, Target], Dict[str, Set[str]]]:
    """
    Index targets by name and collect each target's direct dependencies.

    Requires:
      - target.name: str (unique)
      - target.needs: names of targets that must run BEFORE this target
    """
    by_name: Dict[str, Target] = {}
    for t in targets:
        if t.name in by_name:
            raise ValueError(f"Duplicate target name: {t.name}")
        by_name[t.name] = t

    deps: Dict[str, Set[str]] = {}
    for t in targets:
        for d in t.needs:
            if d not in by_name:
                raise ValueError(
                    f"Target '{t.name}' needs missing target '{d}'. "
                    f"Known targets: {sorted(by_name)}"
                )
        deps[t.name] = set(t.needs)

    return by_name, deps


def _closure(seeds: Iterable[str], by_name: Dict[str, Target], deps: Dict[str, Set[str]]) -> Set[str]:
    seen: Set[str] = set()
    stack = list(seeds)
    while stack:
        name = stack.pop()
        if name in seen:
            continue
        if name not in by_name:
            raise ValueError(f"Unknown target '{name}'. Known targets: {sorted(by_name)}")
        seen.add(name)
        stack.extend(deps[name])
    return seen


def execution_plan(targets: Sequence[Target], seeds: Sequence[str]) -> List[Target]:
    """
    Return the targets that must run to satisfy `seeds`, dependencies first.

    Ties are broken by declaration order so the plan is deterministic.
    """
    by_name, deps = build_graph(targets)
    needed = _closure(seeds, by_name, deps)

    order = {t.name: i for i, t in enumerate(targets)}
    indeg: Dict[str, int] = {n: len(deps[n] & needed) for n in needed}
    dependents: Dict[str, Set[str]] = {n: set() for n in needed}
    for n in needed:
        for d in deps[n]:
            dependents[d].add(n)

    q = deque(sorted((n for n, d in indeg.items() if d == 0), key=order.__getitem__))
    plan: List[Target] = []

    while q:
        node = q.popleft()
        plan.append(by_name[node])
        for child in sorted(dependents[node], key=order.__getitem__):
            indeg[child] -= 1
            if indeg[child] == 0:
                q.append(child)

    if len(plan) != len(needed):
        remaining = sorted(n for n, d in indeg.items() if d > 0)
        raise ValueError(f"Target graph has a cycle. Stuck targets: {remaining}")

    return plan


def relevant_targets(targets: Sequence[Target], invoked: Sequence[str]) -> List[Target]:
    """
    Plan each invoked target on its own and concatenate the plans,
    keeping the first occurrence of every target.
    """
    seen: Set[str] = set()
    out: List[Target] = []
    for name in invoked:
        for t in execution_plan(targets, [name]):
            if t.name not in seen:
                seen.add(t.name)
                out.append(t)
    return out
