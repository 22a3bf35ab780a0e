from __future__ import annotations

import orjson
from typing import Any, Tuple


def dumps_body(obj: Any) -> bytes:
    """Serialize a request body to compact UTF-8 JSON bytes.

    Key order is preserved; these exact bytes are both digested and sent.
    """
    return orjson.dumps(obj)


def try_parse_json(text: str | bytes) -> Tuple[Any | None, str | None]:
    """Parse JSON, returning (obj, None) on success, or (None, error) on failure."""
    try:
        return orjson.loads(text), None
    except orjson.JSONDecodeError as e:
        return None, str(e)
