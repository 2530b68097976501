from pathlib import Path
from typing import Iterable, List

from soyloader.soy import AstCache


def resolve_internal_deps(
    candidates: Iterable[Path], namespaces: Iterable[str], asts: AstCache
) -> List[Path]:
    """
    Keep the candidate files whose declared namespace is in ``namespaces``.

    Candidate order is preserved; duplicate namespaces are irrelevant.
    """
    required = set(namespaces)
    return [path for path in candidates if asts.get(path).namespace in required]
