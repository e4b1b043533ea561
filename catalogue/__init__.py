"""Describes the catalogue's translation domain. Centres around the `Ingredient`.

Why is this hard?

- Recipes are written in one language and read in many.
- The same ingredient turns up as "Tomato", "tomatoes" and "Tomate". There
  must only ever be one of it.
- Translations come from an external service. It fails, so everything built on
  it has to fall back to the original text.
- Every translation is cached forever, so an edit has to find the stale ones.

The store and the translation service are injected everywhere so both can be
faked.
"""
