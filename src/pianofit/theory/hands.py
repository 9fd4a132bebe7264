from enum import Enum


class HandSelection(Enum):
    LEFT = "left"
    RIGHT = "right"
    BOTH = "both"
