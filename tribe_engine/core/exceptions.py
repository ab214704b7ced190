class TribeEngineError(Exception):
    """Base exception for the scoring engine."""

    pass


class UnknownActionError(TribeEngineError):
    """Raised when an XP action kind is not present in the points table."""

    def __init__(self, action: object):
        self.action = action
        super().__init__(f"Unknown XP action: {action!r}")


class ConfigurationError(TribeEngineError):
    """Raised when scoring tables fail validation at load time."""

    pass


class InvalidRecordError(TribeEngineError):
    """Raised when a record handed in by a collaborator fails validation."""

    def __init__(self, record_type: str, detail: str):
        self.record_type = record_type
        self.detail = detail
        super().__init__(f"Invalid {record_type}: {detail}")
