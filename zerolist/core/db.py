
import logging
from contextvars import ContextVar
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from zerolist.configs import DB_URI, DEBUG

logger = logging.getLogger(__name__)
# In-memory SQLite must share one connection across threads
engine_kwargs = {'echo': DEBUG}
if DB_URI.startswith('sqlite'):
    engine_kwargs['connect_args'] = {'check_same_thread': False}
    if ':memory:' in DB_URI:
        engine_kwargs['poolclass'] = StaticPool
else:
    engine_kwargs['client_encoding'] = 'utf8'
    engine_kwargs['pool_pre_ping'] = True
engine = create_engine(DB_URI, **engine_kwargs)
# One session per request, shared by the handler and its dependencies
# whichever threadpool thread they run on. Outside a request the scope is None.
request_scope = ContextVar("request_scope", default=None)
session = scoped_session(sessionmaker(
    bind=engine, autocommit=False, autoflush=False), scopefunc=request_scope.get)

class ZerolistBase:
    @classmethod
    def get(cls, id):
        return session.get(cls, id)

Base = declarative_base(cls=ZerolistBase)

def init():
    try:
        # Registers the tables on Base before creating them
        from zerolist.core import models  # noqa: F401
        Base.metadata.create_all(bind=engine)
        return session
    except Exception as e:
        logger.warning(f"[WARNING] Database initialization failed: {e}")
