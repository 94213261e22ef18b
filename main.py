import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import dispose_db, init_db
from api.contacts import router as contacts_router
from api.documents import router as documents_router
from api.loans import router as loans_router
from api.messages import router as messages_router
from api.requirements import router as requirements_router
from api.tasks import router as tasks_router
from api.templates import router as templates_router
from services.assistant import build_loan_assistant
from services.checklist import ChecklistTracker
from services.email_templates import default_templates
from services.requirement_catalog import build_default_catalog
from services.requirements import RequirementResolver

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db()
    resolver = RequirementResolver(build_default_catalog())
    app.state.resolver = resolver
    app.state.tracker = ChecklistTracker(resolver)
    app.state.assistant = build_loan_assistant(settings, resolver)
    app.state.templates = default_templates()
    logger.info("%s started (funders: %s)", settings.app_name, ", ".join(resolver.catalog.funders))
    yield
    await dispose_db()


app = FastAPI(
    title=settings.app_name,
    description="Loan file checklists, document tracking, email drafts and processing assistant",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(loans_router)
app.include_router(requirements_router)
app.include_router(documents_router)
app.include_router(contacts_router)
app.include_router(tasks_router)
app.include_router(messages_router)
app.include_router(templates_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
