from .channel import Channel
from .confirmation_handler import ConfirmationHandler
from .message_router import MessageRouter
from .pending_step import PendingStepSlot
from .session_registry import Session, SessionRegistry
from .turn_processor import TurnProcessor

__all__ = [
    "Channel",
    "ConfirmationHandler",
    "MessageRouter",
    "PendingStepSlot",
    "Session",
    "SessionRegistry",
    "TurnProcessor",
]
