"""
Coffee API - Coffee Service (Data Access & Validation)
=======================================================

What:  Create/list operations for coffees and coffee drinks, plus the
       request-level checks that must pass before a write.
How:   Receives an AsyncSession per call, runs SQLAlchemy queries, and
       returns Pydantic response models.
Who:   Called by the route handlers in coffee_api.routes.coffee.

Error Handling Strategy:
    - Presence checks and the coffee_id existence check raise ValidationError
      (→ 400) before anything is written.
    - Any SQLAlchemyError is logged and wrapped in DatabaseError (→ 500);
      the driver message never reaches the client.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from coffee_api.exceptions import DatabaseError, ValidationError
from coffee_api.models.coffee import Coffee, CoffeeDrink
from coffee_api.schemas.coffee import (
    CoffeeDrinkDetail,
    CoffeeDrinkListResponse,
    CoffeeDrinkResponse,
    CoffeeResponse,
    CoffeeListResponse,
)

logger = logging.getLogger(__name__)


class CoffeeService:
    """
    Business logic layer for coffees and coffee drinks.

    Responsibilities:
        - list_coffees(): every coffee, ordered by id
        - list_drinks(): every drink with its coffee embedded, ordered by id
        - create_coffee(): validate name/country, insert, commit
        - create_drink(): validate name/coffee_id, check the coffee exists,
          insert, commit

    Stateless: one shared instance serves all requests.
    """

    async def list_coffees(self, db: AsyncSession) -> CoffeeListResponse:
        """Return all coffees. Ordered by primary key so repeated reads match."""
        try:
            result = await db.execute(select(Coffee).order_by(Coffee.id))
            coffees = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing coffees: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve coffees.",
                context={"operation": "list_coffees", "error_type": type(e).__name__},
            )

        return CoffeeListResponse(
            data=[CoffeeResponse.model_validate(coffee) for coffee in coffees]
        )

    async def list_drinks(self, db: AsyncSession) -> CoffeeDrinkListResponse:
        """
        Return all coffee drinks with their coffee.

        Query plan:
            SELECT ... FROM coffee_drink ORDER BY id
            SELECT ... FROM coffee WHERE id IN (...)   -- selectinload
        """
        try:
            result = await db.execute(
                select(CoffeeDrink)
                .options(selectinload(CoffeeDrink.coffee))
                .order_by(CoffeeDrink.id)
            )
            drinks = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing coffee drinks: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve coffee drinks.",
                context={"operation": "list_drinks", "error_type": type(e).__name__},
            )

        return CoffeeDrinkListResponse(
            data=[CoffeeDrinkDetail.model_validate(drink) for drink in drinks]
        )

    async def create_coffee(
        self,
        db: AsyncSession,
        name: Optional[str],
        country: Optional[str],
    ) -> CoffeeResponse:
        """
        Insert a new coffee.

        Raises:
            ValidationError: name or country missing/empty (→ 400)
            DatabaseError: insert or commit failed (→ 500)
        """
        if not name or not country:
            raise ValidationError(
                message="name and country are required",
                context={"name": bool(name), "country": bool(country)},
            )

        coffee = Coffee(name=name, country=country)
        try:
            db.add(coffee)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error creating coffee: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create coffee.",
                context={"operation": "create_coffee", "error_type": type(e).__name__},
            )

        logger.info("Coffee created: id=%s name=%r", coffee.id, coffee.name)
        return CoffeeResponse.model_validate(coffee)

    async def create_drink(
        self,
        db: AsyncSession,
        name: Optional[str],
        coffee_id: Optional[int],
        description: Optional[str] = None,
    ) -> CoffeeDrinkResponse:
        """
        Insert a new coffee drink after confirming its coffee exists.

        Workflow:
            1. name and coffee_id present            → else 400
            2. SELECT coffee WHERE id = :coffee_id   → else 400 "No coffee found with id <id>"
            3. INSERT coffee_drink, COMMIT

        Raises:
            ValidationError: missing field or unknown coffee (→ 400)
            DatabaseError: lookup, insert or commit failed (→ 500)
        """
        if not name or not coffee_id:
            raise ValidationError(
                message="name and coffee_id are required",
                context={"name": bool(name), "coffee_id": coffee_id},
            )

        try:
            coffee = await db.get(Coffee, coffee_id)
        except SQLAlchemyError as e:
            logger.error("Database error looking up coffee %s: %s", coffee_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not verify the referenced coffee.",
                context={"operation": "get_coffee", "coffee_id": coffee_id,
                         "error_type": type(e).__name__},
            )

        if coffee is None:
            raise ValidationError(
                message=f"No coffee found with id {coffee_id}",
                field="coffee_id",
                context={"coffee_id": coffee_id},
            )

        drink = CoffeeDrink(name=name, coffee_id=coffee.id, description=description)
        try:
            db.add(drink)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error creating coffee drink: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create coffee drink.",
                context={"operation": "create_drink", "coffee_id": coffee_id,
                         "error_type": type(e).__name__},
            )

        logger.info("Coffee drink created: id=%s name=%r coffee_id=%s", drink.id, drink.name, drink.coffee_id)
        return CoffeeDrinkResponse.model_validate(drink)


# ── Singleton Instance ────────────────────────────────────────────────────
coffee_service = CoffeeService()
