from proceedings.store.models import Message, Proceeding
from proceedings.store.repository import ProceedingNotFoundError, ProceedingRepository
from proceedings.store.requests import GeneratedRequest, RequestView, UserRequest, proceeding_from_request

__all__ = [
    "Message",
    "Proceeding",
    "ProceedingNotFoundError",
    "ProceedingRepository",
    "GeneratedRequest",
    "RequestView",
    "UserRequest",
    "proceeding_from_request",
]
