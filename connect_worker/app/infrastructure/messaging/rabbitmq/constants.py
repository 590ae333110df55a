"""RabbitMQ receiver lifecycle states and dead-letter naming."""
from enum import Enum

DEAD_LETTER_SUFFIX = ".dead-letter"
DEAD_LETTER_REASON_HEADER = "x-dead-letter-reason"


class ReceiverState(str, Enum):
    OPEN = "OPEN"
    CONSUMING = "CONSUMING"
    CLOSING = "CLOSING"
    CLOSED = "CLOSED"
