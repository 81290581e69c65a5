from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Union


def load_class_names(path: Union[str, Path]) -> List[str]:
    """
    Load class labels, ordered by class index.

    Two formats are accepted. A `names:` mapping:

        names:
          0: aeroplane
          1: bicycle
          ...

    or a plain text file with one label per line (`voc.names` style).
    This function intentionally avoids adding a PyYAML dependency.
    """

    lines = Path(path).read_text(encoding="utf-8").splitlines()
    stripped = [ln.strip() for ln in lines]
    if "names:" in stripped:
        return _parse_names_mapping(stripped, path)
    return [ln for ln in stripped if ln and not ln.startswith("#")]


def _parse_names_mapping(lines: List[str], path: Union[str, Path]) -> List[str]:
    names: Dict[int, str] = {}
    in_names = False

    for line in lines:
        if not line or line.startswith("#"):
            continue
        if line == "names:":
            in_names = True
            continue
        if not in_names:
            continue

        # Parse "id: label"
        if ":" not in line:
            continue
        left, right = line.split(":", 1)
        left = left.strip()
        right = right.strip().strip("'").strip('"')
        if not left.isdigit():
            continue
        names[int(left)] = right

    expected = list(range(len(names)))
    if sorted(names) != expected:
        raise ValueError(f"Class ids in {path} must be contiguous from 0 (got {sorted(names)})")
    return [names[i] for i in expected]
