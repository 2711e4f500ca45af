"""
Error taxonomy for the compatibility, eligibility and matching helpers.
Every error raised by the algorithms package derives from BloodBridgeError.
"""


class BloodBridgeError(Exception):
    """Base class for all BloodBridge domain errors"""
    pass


class InvalidBloodType(BloodBridgeError, ValueError):
    """Unrecognized blood type code"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid blood type: {value!r}")


class InvalidDate(BloodBridgeError, ValueError):
    """Date of birth that cannot be parsed or lies in the future"""

    def __init__(self, value, reason="unparseable date"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid date of birth {value!r}: {reason}")


class PoolFetchFailed(BloodBridgeError):
    """The donor pool could not be retrieved (distinct from an empty pool)"""
    pass


class InvalidSelection(BloodBridgeError, ValueError):
    """Geography selection that would leave an orphaned child value"""
    pass
