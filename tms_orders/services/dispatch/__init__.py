from .candidate_finder import candidate_finder
from .submitter import dispatch_submitter
from .service import auto_dispatch_service

__all__ = ["candidate_finder", "dispatch_submitter", "auto_dispatch_service"]
