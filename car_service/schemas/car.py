"""Car Schemas: declarative structure of Car and its embedded Manufacturer.

Invariants:
    - Wire names are camelCase aliases; snake_case names are rejected as extra keys
    - extra="forbid" on both models: no properties beyond the declared set
    - Strict types: numbers are not accepted for strings, booleans and numeric
      strings are not accepted for numbers
    - Coordinates must be finite: NaN and Infinity are rejected
    - Manufacturer is embedded by value inside Car (no reference, no id)

Design Decisions:
    - These models only describe and check shape; stored documents are the
      request payloads themselves, never model_dump() output
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictStr


class Manufacturer(BaseModel):
    """Manufacturer Schema"""
    model_config = ConfigDict(extra="forbid", title="Manufacturer")

    company_name: StrictStr = Field(
        alias="companyName", description="Manufacturer Company.",
    )
    country: StrictStr = Field(
        description="Country where car was manufactured.",
    )
    factory_location: list[Annotated[StrictFloat, Field(allow_inf_nan=False)]] = Field(
        None, alias="factoryLocation",
        description="Factory coordinates as [latitude, longitude].",
    )


class Car(BaseModel):
    """Car Schema"""
    model_config = ConfigDict(extra="forbid", title="Car")

    manufacturer: Manufacturer
    brand: StrictStr = Field(description="Car Brand.")
    color: StrictStr = Field(description="Car Color.")
    car_model: StrictStr = Field(
        None, alias="carModel", description="Car Model.",
    )


def top_level_fields(model: type[BaseModel]) -> frozenset[str]:
    """Wire names of a model's top-level fields."""
    return frozenset(
        info.alias or name for name, info in model.model_fields.items()
    )
