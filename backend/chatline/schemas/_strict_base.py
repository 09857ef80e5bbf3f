"""Schema baselines shared by request, response and websocket payload models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StrictRequestModel(BaseModel):
    """Request DTO base that always forbids unexpected fields."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class CamelModel(BaseModel):
    """Wire model whose JSON keys are camelCase (``senderId``) while attributes stay snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
