# live_sessions/crud/__init__.py

from .crud_live_session import live_session
