# live_sessions/db/base_class.py

from sqlalchemy.orm import declarative_base

# Single declarative base shared by the LiveSession aggregate and its
# participant / feedback children.
Base = declarative_base()
