"""
Pydantic models for API requests.
These define the contract between the API and external clients.

New request submissions are parsed straight into the domain model
(``pharmacy_desk.domain.NewRequestSubmission``); this file only holds
bodies that have no domain counterpart.
"""

from typing import Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Admin credentials posted by the login form."""

    username: str
    password: str


class StatusUpdateRequest(BaseModel):
    """Body of a status change.

    ``status`` is optional here so that a missing value is reported with
    the same message as an unknown one would be, by the use case.
    """

    status: Optional[str] = None


class TestEmailRequest(BaseModel):
    # Not a test case; keeps pytest from collecting it.
    __test__ = False

    to: Optional[str] = None
