"""
Coffee API - Pydantic Request/Response Schemas
===============================================

What:  Pydantic models defining the HTTP contract.
How:   FastAPI parses request bodies into the *Create models and serializes
       handler results through the *Response models.

Request models declare every field Optional: presence is checked by
CoffeeService so that a missing field yields a 400 with a readable message
instead of FastAPI's generic 422.

Response envelope:
    Success: {"data": <record or list of records>}
    Error:   {"error": <message>}
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CoffeeCreate(BaseModel):
    """Body of POST /coffee."""
    name: Optional[str] = Field(default=None, description="Coffee name (max 100 chars)")
    country: Optional[str] = Field(default=None, description="Country of origin (max 100 chars)")


class CoffeeDrinkCreate(BaseModel):
    """Body of POST /coffee/drinks."""
    name: Optional[str] = Field(default=None, description="Drink name (max 150 chars)")
    coffee_id: Optional[int] = Field(default=None, description="ID of an existing coffee")
    description: Optional[str] = Field(default=None, description="Free-form description")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CoffeeResponse(BaseModel):
    """A coffee row."""
    id: int = Field(description="Auto-incrementing coffee identifier")
    name: str
    country: str

    model_config = {"from_attributes": True}


class CoffeeDrinkResponse(BaseModel):
    """A coffee drink row, as returned after creation."""
    id: int = Field(description="Auto-incrementing drink identifier")
    name: str
    description: Optional[str] = None
    coffee_id: int

    model_config = {"from_attributes": True}


class CoffeeDrinkDetail(CoffeeDrinkResponse):
    """
    A coffee drink with its coffee embedded.

    The nested record is serialized under the key "Coffee" (the name of the
    associated record type). Both spellings are accepted on validation,
    since FastAPI re-validates the by-alias dump of a returned model. e.g.:
        {"id": 1, "name": "Latte", "description": null, "coffee_id": 3,
         "Coffee": {"id": 3, "name": "Arabica", "country": "Colombia"}}
    """
    coffee: Optional[CoffeeResponse] = Field(
        default=None,
        validation_alias=AliasChoices("coffee", "Coffee"),
        serialization_alias="Coffee",
        description="The coffee this drink is made from",
    )


class CoffeeListResponse(BaseModel):
    """Returned by GET /coffee/list."""
    data: List[CoffeeResponse]


class CoffeeDrinkListResponse(BaseModel):
    """Returned by GET /coffee/drinks/list."""
    data: List[CoffeeDrinkDetail]


class CoffeeCreatedResponse(BaseModel):
    """Returned by POST /coffee with HTTP 201."""
    data: CoffeeResponse


class CoffeeDrinkCreatedResponse(BaseModel):
    """Returned by POST /coffee/drinks with HTTP 201."""
    data: CoffeeDrinkResponse


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body shared by every endpoint.

    Example:
        {"error": "name and coffee_id are required"}
    """
    error: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(default="ok", description="Always 'ok' while the process serves requests")
