"""Multi-step transaction flow state carried by a session between confirmations."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class FlowModel(BaseModel):
    # Tools report these as camelCase JSON; snake_case is accepted too.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class PendingStep(FlowModel):
    """A follow-up action to run once the signer confirms the current transaction."""

    tool: str = Field(..., min_length=1, description="Tool family that produced the continuation")
    step: str = Field(..., min_length=1, description="Stage tag, e.g. 'approval', 'deposit', 'stake'")
    operation: Optional[str] = None
    original_params: Dict[str, Any] = Field(default_factory=dict)
    next_step_instructions: Optional[str] = None

    @field_validator("original_params", mode="before")
    @classmethod
    def null_params_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class OperationContext(FlowModel):
    """Describes the last prepared operation so a confirmation can be summarised."""

    tool: Optional[str] = None
    protocol: Optional[str] = None
    operation: Optional[str] = None
    step: Optional[str] = None
    original_params: Dict[str, Any] = Field(default_factory=dict)
    amount_label: Optional[str] = Field(None, description="Human readable amount, e.g. '5000 SAUCE'")
    token_ids: List[str] = Field(default_factory=list)

    @field_validator("original_params", mode="before")
    @classmethod
    def null_params_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("token_ids", mode="before")
    @classmethod
    def null_token_ids_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value
