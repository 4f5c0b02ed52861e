"""
Registration DTOs

Command/Response pattern for clean architecture separation:
- RegisterUserCommand: Input to use case (validated business intent)
- RegistrationResponse: Output from use case (structured result)
"""

from typing import Optional

from pydantic import BaseModel

from .dtos import UserInfo


class RegisterUserCommand(BaseModel):
    """
    Registration command - represents validated registration intent

    Created by API layer after request validation passes.
    Contains only business-relevant data (no HTTP concerns).
    """

    username: str
    email: str
    password: str
    first_name: str
    last_name: str
    role: str = "cashier"


class RegistrationResponse(BaseModel):
    """
    Registration response

    requires_approval tells the client whether the account can log in yet.
    """

    user: UserInfo
    requires_approval: bool
    message: str
    created_by: Optional[str] = None
