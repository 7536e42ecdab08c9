import enum


class Decision(enum.Enum):
    Keep = "keep"
    Discard = "discard"
