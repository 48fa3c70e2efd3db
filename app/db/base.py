from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Every model module imports Base from here; app.db.models imports them all
# so that Base.metadata is complete for create_all and Alembic.
