"""Request schemas for the state-assigner routes."""

from typing import Any, Optional

from pydantic import Field, model_validator

from newsnexus.schemas.common import SanitizedModel


class StateAssignerRequest(SanitizedModel):
    """Body of ``POST /analysis/state-assigner/``."""

    include_null_state: Optional[Any] = Field(default=None, alias="includeNullState")

    @model_validator(mode="after")
    def _check_bool(self) -> "StateAssignerRequest":
        if self.include_null_state is not None and not isinstance(self.include_null_state, bool):
            raise ValueError("includeNullState must be a boolean value if provided")
        return self


class HumanVerifyRequest(SanitizedModel):
    """Body of ``POST /analysis/state-assigner/human-verify/{article_id}``.

    Types are checked by hand so callers get the same messages for a missing
    field and a wrongly typed one.
    """

    action: Optional[Any] = None
    state_id: Optional[Any] = Field(default=None, alias="stateId")

    @model_validator(mode="after")
    def _check_fields(self) -> "HumanVerifyRequest":
        if not self.action:
            raise ValueError("action field is required")
        if self.action not in ("approve", "reject"):
            raise ValueError('action must be either "approve" or "reject"')
        if self.state_id is None:
            raise ValueError("stateId field is required")
        if isinstance(self.state_id, bool) or not isinstance(self.state_id, int):
            raise ValueError("stateId must be a valid number")
        return self
