"""
Coffee API - Coffee & CoffeeDrink SQLAlchemy Models
====================================================

What:  ORM models for the `coffee` and `coffee_drink` tables.
How:   Declarative mapping on the shared Base; tables are created at startup
       by Database.sync_schema() when absent.

Tables:
    coffee        (id, name, country)
    coffee_drink  (id, name, description, coffee_id → coffee.id)

    One Coffee has many CoffeeDrink rows; each CoffeeDrink belongs to exactly
    one Coffee. No timestamp columns. Rows are never updated or deleted
    through the API.
"""

from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coffee_api.database import Base

# INT UNSIGNED on MySQL, plain INTEGER elsewhere (SQLite in tests needs
# INTEGER PRIMARY KEY for autoincrement)
UnsignedInt = Integer().with_variant(mysql.INTEGER(unsigned=True), "mysql")


class Coffee(Base):
    """A coffee variety and its country of origin."""

    __tablename__ = "coffee"

    id: Mapped[int] = mapped_column(
        UnsignedInt,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)

    drinks: Mapped[List["CoffeeDrink"]] = relationship(
        back_populates="coffee",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Coffee(id={self.id}, name='{self.name}', country='{self.country}')>"


class CoffeeDrink(Base):
    """
    A drink made from one coffee.

    coffee_id is checked against the coffee table by CoffeeService before
    insert; the FOREIGN KEY constraint is a second line, not the contract.
    """

    __tablename__ = "coffee_drink"

    id: Mapped[int] = mapped_column(
        UnsignedInt,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    coffee_id: Mapped[int] = mapped_column(
        UnsignedInt,
        ForeignKey("coffee.id"),
        nullable=False,
        index=True,
    )

    # lazy="raise": async sessions cannot lazy-load, so every read that needs
    # the coffee must ask for it with selectinload()
    coffee: Mapped["Coffee"] = relationship(
        back_populates="drinks",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<CoffeeDrink(id={self.id}, name='{self.name}', coffee_id={self.coffee_id})>"
