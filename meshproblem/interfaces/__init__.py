"""
Interfaces layer package.

Contains FastAPI routers and Pydantic response schemas.
No filter logic belongs here.
"""
