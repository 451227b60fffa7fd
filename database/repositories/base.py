from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def _insert(self, model):
        """INSERT construct supporting ON CONFLICT for the bound dialect."""
        dialect = self.db.get_bind().dialect.name
        if dialect == 'postgresql':
            return postgresql.insert(model)
        if dialect == 'sqlite':
            return sqlite.insert(model)
        raise NotImplementedError(f"Conditional inserts are not supported on {dialect}")
