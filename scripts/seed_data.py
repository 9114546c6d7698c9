#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample recipes and an account that can sign in.

USAGE:
    # From the project root with the virtualenv active
    python scripts/seed_data.py
    python scripts/seed_data.py --recipes recipes.json --clear

    # Credentials for the seeded account
    SEED_USERNAME=admin SEED_PASSWORD=... python scripts/seed_data.py

This script:
1. Creates missing tables
2. Optionally clears existing recipes
3. Loads recipes from a JSON file (or the built-in samples)
4. Creates the seed user if it does not exist
5. Drops the cached listing so the next GET /recipes sees the new data
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.database import SessionLocal, create_tables
from app.models import Recipe, User
from app.schemas import RecipeCreate
from app.services.cache import Cache, get_redis_client
from app.services.listing import RecipeListing
from app.services.recipe_store import RecipeStore
from app.services.sessions import create_user

logger = logging.getLogger("seed_data")

SAMPLE_RECIPES = [
    {
        "name": "Tea",
        "tags": ["drink", "hot"],
        "ingredients": ["water", "tea leaves"],
        "instructions": ["Boil the water", "Steep the leaves for 3 minutes"],
    },
    {
        "name": "Oregano Marinara Pizza",
        "tags": ["main", "pizza", "vegetarian"],
        "ingredients": [
            "1 1/2 cups pizza dough",
            "1/2 cup marinara sauce",
            "1 tsp dried oregano",
            "2 tbsp olive oil",
        ],
        "instructions": [
            "Stretch the dough",
            "Spread the sauce and sprinkle oregano",
            "Drizzle with olive oil and bake for 12 minutes",
        ],
    },
    {
        "name": "Lemonade",
        "tags": ["drink", "cold"],
        "ingredients": ["4 lemons", "1 cup sugar", "5 cups water"],
        "instructions": ["Juice the lemons", "Dissolve the sugar", "Chill and serve"],
    },
]


def load_recipes(path: Path | None) -> list[dict]:
    if path is None:
        return SAMPLE_RECIPES
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def clear_recipes(db: Session) -> None:
    logger.info("Clearing existing recipes...")
    db.execute(delete(Recipe))
    db.commit()


def seed_recipes(store: RecipeStore, recipes: list[dict]) -> int:
    count = 0
    for raw in recipes:
        data = RecipeCreate.model_validate(raw)
        store.insert(data.model_dump())
        count += 1
    logger.info(f"Inserted {count} recipes")
    return count


def seed_user(db: Session, username: str, password: str) -> None:
    existing = db.execute(
        select(User).where(User.username == username.lower())
    ).scalar_one_or_none()
    if existing:
        logger.info(f"User {username!r} already exists")
        return
    create_user(db, username, password)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the Recipes API database")
    parser.add_argument("--recipes", type=Path, help="JSON file with a list of recipes")
    parser.add_argument("--clear", action="store_true", help="Delete existing recipes first")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")

    username = os.environ.get("SEED_USERNAME", "admin")
    password = os.environ.get("SEED_PASSWORD")
    if not password:
        parser.error("SEED_PASSWORD must be set")

    create_tables()

    db = SessionLocal()
    try:
        if args.clear:
            clear_recipes(db)
        store = RecipeStore(db)
        seed_recipes(store, load_recipes(args.recipes))
        seed_user(db, username, password)
        RecipeListing(store, Cache(get_redis_client())).invalidate()
    finally:
        db.close()

    logger.info("Seeding complete")


if __name__ == "__main__":
    main()
