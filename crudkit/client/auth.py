"""Credential sources for authorized client calls."""

import os
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class AuthorizationOptions(BaseModel):
    """Where a client reads its bearer token from.

    Attributes:
        storage: ``memory`` keeps ``token`` on the client, ``env`` reads the
            environment variable named ``key`` before every call
        token: Token for ``memory`` storage
        key: Variable name for ``env`` storage
    """

    model_config = ConfigDict(extra="forbid")

    storage: Literal["memory", "env"] = "memory"
    token: Optional[str] = None
    key: Optional[str] = None

    @model_validator(mode="after")
    def _check_source(self) -> "AuthorizationOptions":
        if self.storage == "env" and not self.key:
            raise ValueError("env authorization requires a key")
        return self

    def get_token(self) -> Optional[str]:
        """Current token, or None when unavailable."""
        if self.storage == "env":
            return os.environ.get(self.key)
        return self.token
