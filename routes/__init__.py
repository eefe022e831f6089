# Routes package __init__.py - re-exports routers for main.py convenience
from .actions import router as actions_router

__all__ = ['actions_router']
