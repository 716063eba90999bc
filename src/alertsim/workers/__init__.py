from __future__ import annotations

from alertsim.workers.receiver import ReceiverState, WebhookReceiver
from alertsim.workers.sender import BatchedSender, PushOutcome, PushStatus, SendReport

__all__ = [
    "BatchedSender",
    "SendReport",
    "PushOutcome",
    "PushStatus",
    "WebhookReceiver",
    "ReceiverState",
]
