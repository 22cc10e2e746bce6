from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import formhost.models  # noqa: F401  (register every mapper before first query)
from formhost.api.health import router as health_router
from formhost.api.root import router as root_router
from formhost.api.forms import router as forms_router
from formhost.api.versions import router as versions_router
from formhost.api.drafts import router as drafts_router
from formhost.api.templates import router as templates_router
from formhost.api.categories import router as categories_router
from formhost.api.public import router as public_router
from formhost.core.config import settings
from formhost.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="Formhost")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(root_router)
app.include_router(health_router)
app.include_router(forms_router)
app.include_router(versions_router)
app.include_router(drafts_router)
app.include_router(templates_router)
app.include_router(categories_router)
app.include_router(public_router)
