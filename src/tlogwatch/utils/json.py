import json
from typing import Any, Dict, List, Tuple


def json_dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _unique_object(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    obj: Dict[str, Any] = {}
    for key, value in pairs:
        if key in obj:
            raise ValueError(f"duplicate key {key!r}")
        obj[key] = value
    return obj


def json_loads(s: str) -> Any:
    """
    Strict json.loads for records that feed trust decisions.

    Duplicate keys and NaN/Infinity raise ValueError instead of being
    silently resolved.
    """
    return json.loads(s, object_pairs_hook=_unique_object, parse_constant=_reject_constant)
