import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from clinic_scheduler.core import config
from clinic_scheduler.database import Base, SessionLocal, engine, ensure_scheduling_schema
from clinic_scheduler.models import appointment, provider, service, settings  # noqa: F401
from clinic_scheduler.repositories.sql import seed_demo_data
from clinic_scheduler.routes import appointment_routes, availability_routes, settings_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Clinic Scheduler')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()

    if config.STORAGE_BACKEND == 'memory':
        logger.info('Using the in-memory clinic store')
        return

    try:
        Base.metadata.create_all(bind=engine)
        ensure_scheduling_schema()
        if config.SEED_DEMO_DATA:
            db = SessionLocal()
            try:
                seed_demo_data(db)
            finally:
                db.close()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Clinic Scheduler API Running'}


app.include_router(availability_routes.router, prefix='/availability')
app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(settings_routes.router, prefix='/settings')
