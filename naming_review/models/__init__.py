"""Database models"""
from naming_review.models.form_configuration import FormConfiguration
from naming_review.models.naming_request import NamingRequest, RequestStatus, TERMINAL_STATUSES
from naming_review.models.request_event import RequestEvent
from naming_review.models.approved_name import ApprovedName, ApprovedNameSource

__all__ = [
    "FormConfiguration",
    "NamingRequest",
    "RequestStatus",
    "TERMINAL_STATUSES",
    "RequestEvent",
    "ApprovedName",
    "ApprovedNameSource",
]
