from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class _End(Enum):
    END = "END"


# END marks end-of-stream on a channel; compare with is_end(), never with ==
# against payload values.
END = _End.END


def is_end(item: Any) -> bool:
    return item is END


@dataclass(frozen=True)
class Line:
    """
    A trimmed, non-empty input line. seq is only set when the pipeline
    preserves input order.
    """
    text: str
    seq: Optional[int] = None


@dataclass(frozen=True)
class ResultRecord:
    original: str
    transformed: str
    seq: Optional[int] = None


DEFAULT_INPUT_FILE = "input.txt"
DEFAULT_OUTPUT_FILE = "output.txt"
DEFAULT_WORKERS = 5
DEFAULT_QUEUE_SIZE = 100
DEFAULT_JOIN_TIMEOUT = 60.0

# Channel wake-up interval used to observe interrupt() while blocked.
CHANNEL_POLL_INTERVAL = 0.05
