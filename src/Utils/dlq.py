import json
import logging
import os
import time
import uuid
from typing import Any, Optional

logger = logging.getLogger("parallel_stemmer.dlq")


def write_dlq(item: Any, error: str, dlq_dir: str, exc_trace: Optional[str] = None) -> Optional[str]:
    """
    Write a dead-letter entry for a line the transform rejected.
    Returns the path of the written file, or None if it could not be written.

    Stored fields:
      - id, ts (entry identity)
      - line (original text) and seq when known
      - error, trace
    """
    entry = {
        "id": uuid.uuid4().hex,
        "ts": time.time(),
        "line": getattr(item, "text", item if isinstance(item, str) else repr(item)),
        "seq": getattr(item, "seq", None),
        "error": error,
        "trace": exc_trace,
    }

    fname = f"dlq_{int(entry['ts'])}_{entry['id']}.json"
    out_path = os.path.join(dlq_dir, fname)
    try:
        os.makedirs(dlq_dir, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as fh:
            json.dump(entry, fh, ensure_ascii=False, indent=2, default=str)
    except OSError as e:
        logger.warning("Failed to write DLQ entry to %s: %s", out_path, e)
        return None
    return out_path
