import contextlib
import functools
import logging
from typing import Any, Awaitable, Callable

from rich.logging import RichHandler
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

import config
import db
from catalogue.models import RecipeDraft
from catalogue.repository import IngredientNotFound, RecipeNotFound, Store
from catalogue.resolver import IngredientResolver
from catalogue.services import (
    clear_recipe_translations,
    create_share_link,
    delete_recipe,
    edit_ingredient_translation,
    edit_recipe_translation,
    fetch_shared_recipe,
    get_translated_recipe,
    list_translated_titles,
    save_recipe,
    stop_sharing,
)
from catalogue.text import CaseFolding, language_from_header, normalise_language
from catalogue.translations import TranslationCache
from catalogue.translator import TranslationService, translator_factory


CONFIG = config.Config()


logging.basicConfig(
    level=CONFIG.log_level,
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True)],
)
logger = logging.getLogger(__name__)


def wire(
    app: Starlette,
    *,
    store: Store,
    translator: TranslationService,
    case_folding: CaseFolding | None = None,
) -> None:
    case_folding = (
        CaseFolding(CONFIG.preserve_case_languages) if case_folding is None else case_folding
    )
    app.state.store = store
    app.state.translator = translator
    app.state.resolver = IngredientResolver(
        ingredients=store.ingredients,
        translator=translator,
        case_folding=case_folding,
    )
    app.state.cache = TranslationCache(
        store=store,
        translator=translator,
        case_folding=case_folding,
    )


@contextlib.asynccontextmanager
async def lifespan(app: Starlette):
    database = db.database_factory(CONFIG)
    await database.connect()
    await db.create_db(database)
    translator = translator_factory(CONFIG)
    wire(app, store=Store.from_database(database), translator=TranslationService(translator))
    logger.info("Serving with the %s translator.", CONFIG.translator.value)
    yield
    await translator.close()
    await database.disconnect()


def aJSONResponse(route: Callable[..., Awaitable[Any]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> JSONResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            data, code = resp, 200
        else:
            data, code = resp
        return JSONResponse(data, status_code=code)

    return wrapper


def request_language(request: Request) -> str:
    lang = request.query_params.get("lang")
    if lang:
        return normalise_language(lang, CONFIG.default_language)
    return language_from_header(request.headers.get("accept-language"), CONFIG.default_language)


async def json_object(request: Request) -> dict[str, Any]:
    data = await request.json()
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object.")
    return data


async def not_found(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": f"Not found: {exc}"}, status_code=404)


async def bad_request(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=400)


async def recipes(request: Request) -> JSONResponse:
    match request.method.lower():
        case "get":
            return await recipe_titles(request)
        case "post":
            return await create_recipe(request)
        case _:
            raise ValueError("Unsupported method.")


@aJSONResponse
async def recipe_titles(request: Request) -> list[dict[str, Any]]:
    titles = await list_translated_titles(
        request_language(request),
        store=request.app.state.store,
        cache=request.app.state.cache,
    )
    return [
        {"id": r.id, "title": title, "original_language": r.original_language}
        for r, title in titles
    ]


@aJSONResponse
async def create_recipe(request: Request) -> tuple[dict[str, Any], int]:
    draft = RecipeDraft.from_dict(await json_object(request))
    recipe = await save_recipe(
        draft,
        store=request.app.state.store,
        resolver=request.app.state.resolver,
        translator=request.app.state.translator,
    )
    return {"id": recipe.id}, 201


async def recipe(request: Request) -> JSONResponse:
    match request.method.lower():
        case "get":
            return await recipe_detail(request)
        case "put":
            return await update_recipe(request)
        case "delete":
            return await remove_recipe(request)
        case _:
            raise ValueError("Unsupported method.")


@aJSONResponse
async def recipe_detail(request: Request) -> dict[str, Any]:
    view = await get_translated_recipe(
        request.path_params["id"],
        request_language(request),
        store=request.app.state.store,
        cache=request.app.state.cache,
    )
    return view.to_dict()


@aJSONResponse
async def update_recipe(request: Request) -> dict[str, Any]:
    draft = RecipeDraft.from_dict(await json_object(request))
    recipe = await save_recipe(
        draft,
        store=request.app.state.store,
        resolver=request.app.state.resolver,
        translator=request.app.state.translator,
        recipe_id=request.path_params["id"],
    )
    return {"id": recipe.id}


@aJSONResponse
async def remove_recipe(request: Request) -> dict[str, Any]:
    await delete_recipe(request.path_params["id"], store=request.app.state.store)
    return {"deleted": request.path_params["id"]}


@aJSONResponse
async def share(request: Request) -> dict[str, Any]:
    id = request.path_params["id"]
    if request.method.lower() == "delete":
        await stop_sharing(id, store=request.app.state.store)
        return {"shared": False}
    token, existing = await create_share_link(id, store=request.app.state.store)
    return {"shared": True, "share_token": token, "is_existing": existing}


@aJSONResponse
async def shared_recipe(request: Request) -> dict[str, Any]:
    view = await fetch_shared_recipe(
        request.path_params["token"],
        request_language(request),
        store=request.app.state.store,
        cache=request.app.state.cache,
    )
    return view.to_dict()


@aJSONResponse
async def recipe_translation(request: Request) -> dict[str, Any]:
    fields = await json_object(request)
    await edit_recipe_translation(
        request.path_params["id"],
        normalise_language(request.path_params["lang"]),
        fields,
        store=request.app.state.store,
    )
    return {"updated": sorted(fields)}


@aJSONResponse
async def clear_translations(request: Request) -> dict[str, Any]:
    cleared = await clear_recipe_translations(
        request.path_params["id"], store=request.app.state.store
    )
    return {"cleared": cleared}


@aJSONResponse
async def ingredient_translation(request: Request) -> dict[str, Any]:
    data = await json_object(request)
    await edit_ingredient_translation(
        request.path_params["id"],
        normalise_language(request.path_params["lang"]),
        store=request.app.state.store,
        name=data.get("name"),
        notes=data.get("notes"),
    )
    return {"updated": sorted(k for k in ("name", "notes") if data.get(k))}


@aJSONResponse
async def resolve_ingredient(request: Request) -> dict[str, Any]:
    data = await json_object(request)
    language = normalise_language(data.get("language"), CONFIG.default_language)
    resolver: IngredientResolver = request.app.state.resolver
    id = await resolver.resolve(str(data.get("name") or ""), language)
    return {"id": id}


app = Starlette(
    debug=True if CONFIG.env == config.Env.local else False,
    routes=[
        Route("/recipes", recipes, methods=["GET", "POST"]),
        Route("/recipes/{id}", recipe, methods=["GET", "PUT", "DELETE"]),
        Route("/recipes/{id}/share", share, methods=["POST", "DELETE"]),
        Route("/recipes/{id}/translations", clear_translations, methods=["DELETE"]),
        Route("/recipes/{id}/translations/{lang}", recipe_translation, methods=["PUT"]),
        Route(
            "/recipe-ingredients/{id}/translations/{lang}",
            ingredient_translation,
            methods=["PUT"],
        ),
        Route("/shared/{token}", shared_recipe),
        Route("/ingredients/resolve", resolve_ingredient, methods=["POST"]),
    ],
    exception_handlers={
        RecipeNotFound: not_found,
        IngredientNotFound: not_found,
        ValueError: bad_request,
    },
    lifespan=lifespan,
)
