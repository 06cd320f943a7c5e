"""
Shared error handling package.

Renders errors that escape the wrapped application as local replies,
in problem+json when the request is in scope of the filter.
"""
