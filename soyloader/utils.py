"""General utils functions"""

from pathlib import Path
from typing import Any, List, Union


def as_list(input: Union[List, Any]) -> List:
    if input is None:
        return []
    if isinstance(input, (list, tuple)):
        return list(input)
    return [input]


def strip_module_suffix(resource_path: Union[str, Path], suffix: str) -> Path:
    """
    Remove the synthetic module suffix a bundler appends to a template path.

    ``/app/src/foo.soy.js`` becomes ``/app/src/foo.soy``. Paths without the
    suffix, or whose whole file name is the suffix, are returned unchanged.

    Args:
        resource_path: Path handed over by the bundler
        suffix: Module marker suffix, e.g. ``.js``

    Returns:
        Path of the template file
    """
    path = Path(resource_path)
    if not suffix or not path.name.endswith(suffix) or path.name == suffix:
        return path
    return path.with_name(path.name[: -len(suffix)])
