from enum import IntEnum


class Action(IntEnum):
    BUY = 0
    SELL = 1
    HOLD = 2

    @classmethod
    def parse(cls, value):
        """
        Map a raw action (name in any case, integer tag, or Action) onto the
        enumeration. Anything unrecognized becomes HOLD.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper(), cls.HOLD)
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                return cls.HOLD
        return cls.HOLD
