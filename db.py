from databases import Database

import config


CREATE_INGREDIENTS_TABLE = """
CREATE TABLE IF NOT EXISTS ingredients (
    id VARCHAR(64) PRIMARY KEY,
    singular_name VARCHAR(256) NOT NULL,
    plural_name VARCHAR(256) NOT NULL,
    translated_names TEXT NOT NULL DEFAULT '{}'
)
"""


CREATE_RECIPES_TABLE = """
CREATE TABLE IF NOT EXISTS recipes (
    id VARCHAR(64) PRIMARY KEY,
    title VARCHAR(256) NOT NULL,
    original_language VARCHAR(16) NOT NULL,
    instructions TEXT NOT NULL DEFAULT '[]',
    notes TEXT,
    source TEXT,
    category VARCHAR(128),
    translated_recipe TEXT NOT NULL DEFAULT '{}',
    share_token VARCHAR(32) UNIQUE,
    is_public BOOLEAN NOT NULL DEFAULT FALSE
)
"""


CREATE_RECIPE_INGREDIENTS_TABLE = """
CREATE TABLE IF NOT EXISTS recipe_ingredients (
    id VARCHAR(64) PRIMARY KEY,
    recipe_id VARCHAR(64) NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
    ingredient_id VARCHAR(64) NOT NULL REFERENCES ingredients(id),
    quantity VARCHAR(64),
    unit VARCHAR(64),
    notes TEXT,
    subheading VARCHAR(256),
    order_index INTEGER NOT NULL DEFAULT 0,
    is_plural BOOLEAN NOT NULL DEFAULT FALSE,
    name_overrides TEXT NOT NULL DEFAULT '{}',
    translated_notes TEXT NOT NULL DEFAULT '{}'
)
"""


CREATE_RECIPE_INGREDIENTS_INDEX = """
CREATE INDEX IF NOT EXISTS recipe_ingredients_recipe_id ON recipe_ingredients (recipe_id)
"""


def database_factory(cfg: config.Config | None = None) -> Database:
    cfg = config.Config() if cfg is None else cfg
    return Database(cfg.db_url)


async def create_db(db: Database) -> None:
    for query in (
        CREATE_INGREDIENTS_TABLE,
        CREATE_RECIPES_TABLE,
        CREATE_RECIPE_INGREDIENTS_TABLE,
        CREATE_RECIPE_INGREDIENTS_INDEX,
    ):
        await db.execute(query=query)  # pyright: ignore[reportUnknownMemberType]
