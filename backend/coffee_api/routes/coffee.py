"""
Coffee API - Coffee Route Handlers
===================================

What:  The four coffee endpoints.
         GET  /coffee/list          → all coffees
         GET  /coffee/drinks/list   → all drinks with their coffee
         POST /coffee               → create a coffee
         POST /coffee/drinks        → create a drink for an existing coffee
How:   Each handler decodes the body, delegates to CoffeeService and wraps
       the result in the {"data": ...} envelope. Validation and database
       failures raise exceptions that the global handlers turn into
       {"error": ...} responses (400 / 500).
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from coffee_api.database import get_db_session
from coffee_api.schemas.coffee import (
    CoffeeCreate,
    CoffeeCreatedResponse,
    CoffeeDrinkCreate,
    CoffeeDrinkCreatedResponse,
    CoffeeDrinkListResponse,
    CoffeeListResponse,
    ErrorResponse,
)
from coffee_api.services.coffee_service import coffee_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coffee", tags=["Coffee"])


@router.get(
    "/list",
    response_model=CoffeeListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all coffees",
)
async def list_coffees(
    db: AsyncSession = Depends(get_db_session),
) -> CoffeeListResponse:
    return await coffee_service.list_coffees(db)


@router.get(
    "/drinks/list",
    response_model=CoffeeDrinkListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all coffee drinks with their coffee",
)
async def list_drinks(
    db: AsyncSession = Depends(get_db_session),
) -> CoffeeDrinkListResponse:
    """Each drink embeds its coffee under the "Coffee" key."""
    return await coffee_service.list_drinks(db)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CoffeeCreatedResponse,
    responses={
        400: {"description": "name or country missing", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a coffee",
)
async def create_coffee(
    payload: CoffeeCreate,
    db: AsyncSession = Depends(get_db_session),
) -> CoffeeCreatedResponse:
    """
    Create a coffee from {"name", "country"}.

    Both fields are required and must be non-empty.
    """
    coffee = await coffee_service.create_coffee(
        db=db,
        name=payload.name,
        country=payload.country,
    )
    return CoffeeCreatedResponse(data=coffee)


@router.post(
    "/drinks",
    status_code=status.HTTP_201_CREATED,
    response_model=CoffeeDrinkCreatedResponse,
    responses={
        400: {
            "description": "name/coffee_id missing, or no coffee with that id",
            "model": ErrorResponse,
        },
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a coffee drink",
)
async def create_drink(
    payload: CoffeeDrinkCreate,
    db: AsyncSession = Depends(get_db_session),
) -> CoffeeDrinkCreatedResponse:
    """
    Create a drink from {"name", "coffee_id", "description"?}.

    The referenced coffee must already exist; otherwise the response is
    400 {"error": "No coffee found with id <id>"} and nothing is written.
    """
    drink = await coffee_service.create_drink(
        db=db,
        name=payload.name,
        coffee_id=payload.coffee_id,
        description=payload.description,
    )
    return CoffeeDrinkCreatedResponse(data=drink)
