import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from telehealth.clients.chat import build_chat_assistant
from telehealth.clients.video import build_video_provisioner
from telehealth.core import config
from telehealth.database import Base, engine, ensure_availability_schema, ensure_appointment_schema
from telehealth.models import appointment, availability, user  # noqa: F401
from telehealth.routes import appointment_routes, availability_routes, chat_routes, user_routes
from telehealth.services.booking import BookingCoordinator

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Telehealth Scheduling API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_collaborators() -> None:
    degraded = config.validate_runtime_config()
    if degraded:
        logger.warning('Starting in degraded mode: %s', ', '.join(degraded))

    video_provisioner = build_video_provisioner()
    app.state.video_provisioner = video_provisioner
    app.state.booking_coordinator = BookingCoordinator(video_provisioner)
    app.state.chat_assistant = build_chat_assistant()


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_availability_schema()
        ensure_appointment_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and Postgres credentials.')


@app.on_event('shutdown')
def close_collaborators() -> None:
    close = getattr(getattr(app.state, 'video_provisioner', None), 'close', None)
    if close is not None:
        close()


@app.get('/')
def root():
    return {'status': 'Telehealth API Running'}


app.include_router(user_routes.router, prefix='/users')
app.include_router(user_routes.doctors_router, prefix='/doctors')
app.include_router(availability_routes.router, prefix='/availability')
app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(chat_routes.router, prefix='/chatbot')
