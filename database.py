from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base
from settings import settings


def init_db(db_url=None):
    db_url = db_url or settings.database_url
    engine_kwargs = {}
    if db_url.startswith('sqlite'):
        # Sessions are opened from background generation threads
        engine_kwargs['connect_args'] = {'check_same_thread': False}
        if db_url in ('sqlite://', 'sqlite:///:memory:'):
            engine_kwargs['poolclass'] = StaticPool
    engine = create_engine(db_url, **engine_kwargs)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


Session = init_db()
