"""API middleware — auth, CORS, rate limiting."""

from rebook.api.middleware.auth import UserContext, authenticate_request
from rebook.api.middleware.cors import setup_cors
from rebook.api.middleware.rate_limit import limiter, setup_rate_limit

__all__ = ["UserContext", "authenticate_request", "limiter", "setup_cors", "setup_rate_limit"]
