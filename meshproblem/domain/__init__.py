"""
Domain layer package.

Contains pure filter logic: entities, value objects, domain services,
and port interfaces. This layer has ZERO external dependencies.
No framework imports, no IO, no side effects.
"""
