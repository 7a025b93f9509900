class RetrainNotifierError(Exception):
    kind = "RetrainNotifierError"


class ValidationError(RetrainNotifierError):
    """Malformed or empty data batch."""
    kind = "ValidationError"


class TrainError(RetrainNotifierError):
    kind = "TrainError"


class RetrainTimeoutError(RetrainNotifierError):
    """Training did not finish inside the configured deadline."""
    kind = "TimeoutError"


class MetricsError(RetrainNotifierError):
    """No successful training has produced metrics yet."""
    kind = "MetricsError"


class NotifyError(RetrainNotifierError):
    kind = "NotifyError"
