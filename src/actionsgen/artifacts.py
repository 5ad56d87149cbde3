# artifacts.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .model import Target

WILDCARD = "*"


class ArtifactRegistry:
    """
    Declared artifact path patterns per target name.

    Targets carry their own `artifacts`; extra patterns can be registered
    for targets defined elsewhere.
    """

    def __init__(self, products: Optional[Dict[str, Tuple[str, ...]]] = None):
        self._products: Dict[str, Tuple[str, ...]] = dict(products or {})

    @classmethod
    def from_targets(cls, targets: Iterable[Target]) -> "ArtifactRegistry":
        return cls({t.name: tuple(t.artifacts) for t in targets})

    def register(self, target: str, *patterns: str) -> "ArtifactRegistry":
        self._products[target] = self._products.get(target, ()) + tuple(patterns)
        return self

    def merged(self, other: Optional["ArtifactRegistry"]) -> "ArtifactRegistry":
        """Return a new registry holding these patterns followed by `other`'s."""
        out = ArtifactRegistry(self._products)
        if other is not None:
            for name, patterns in other._products.items():
                out.register(name, *patterns)
        return out

    def products(self, target: Target) -> Tuple[str, ...]:
        return self._products.get(target.name, ())


def artifact_root(path: Path) -> Optional[Path]:
    """
    Walk from `path` upward and return the first path without a wildcard.

    `out/pkg/*.nupkg` becomes `out/pkg`. Returns None when every
    candidate contains a wildcard.
    """
    for candidate in (path, *path.parents):
        if WILDCARD not in str(candidate):
            return candidate
    return None


def artifact_name(path: Path) -> str:
    """Last segment of `path` relative to its parent."""
    return path.name or str(path).strip("/\\")


def relative_to_root(path: Path, root: Path) -> str:
    return Path(os.path.relpath(path, root)).as_posix()


def resolve_artifact_paths(
    targets: Iterable[Target],
    registry: ArtifactRegistry,
    root: Path,
) -> Tuple[List[Path], List[str]]:
    """
    Normalize the declared artifacts of `targets` and drop duplicates.

    Returns (paths, skipped): distinct normalized paths in first-seen order,
    and the patterns that had no wildcard-free ancestor.
    """
    paths: List[Path] = []
    seen: set[str] = set()
    skipped: List[str] = []

    for t in targets:
        for pattern in registry.products(t):
            p = Path(pattern)
            if not p.is_absolute():
                p = root / p
            normalized = artifact_root(p)
            # unreachable once anchored at root: `/` has no wildcard
            if normalized is None:
                skipped.append(pattern)
                continue
            key = str(normalized)
            if key not in seen:
                seen.add(key)
                paths.append(normalized)

    return paths, skipped
