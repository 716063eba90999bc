from __future__ import annotations


class AlertSimException(Exception):
    """Base exception for the alert simulator."""

    pass


class TargetConfigError(AlertSimException):
    """Raised when an Alertmanager target address cannot be used."""

    def __init__(self, target: str, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"failed to create client: {target}: {reason}")


class TargetQueryError(AlertSimException):
    """Raised when querying an Alertmanager's status fails."""

    def __init__(self, target: str, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"failed to query alertmanager {target}: {reason}")


class PlanError(AlertSimException):
    """Raised when a plan file cannot be read or is invalid."""

    def __init__(self, reason: str, path: str | None = None):
        self.path = path
        self.reason = reason
        prefix = f"plan {path}: " if path else "plan: "
        super().__init__(prefix + reason)


class ReceiverBindError(AlertSimException):
    """Raised when the webhook receiver cannot bind its listen address."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"cannot listen on {address}: {reason}")


class ReceiverStateError(AlertSimException):
    """Raised when the webhook receiver is used out of lifecycle order."""

    pass
