from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from myplan.config import settings
from myplan.exceptions import register_exception_handlers
from myplan.logging_config import get_logger, setup_logging
from myplan.middleware import RequestLoggingMiddleware
from myplan import admin as admin_module
from myplan import auth as auth_module
from myplan import bookings as bookings_module
from myplan import experiences as experiences_module
from myplan import explore as explore_module
from myplan import friends as friends_module
from myplan import highlights as highlights_module
from myplan import itineraries as itineraries_module
from myplan import reviews as reviews_module

setup_logging()
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="MyPlan experiences booking API",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

# Include routers
app.include_router(
    auth_module.router,
    prefix=f"{settings.API_V1_STR}/auth",
    tags=["Authentication"]
)

app.include_router(
    bookings_module.router,
    prefix=f"{settings.API_V1_STR}/bookings",
    tags=["Bookings"]
)

app.include_router(
    bookings_module.ticket_router,
    prefix=f"{settings.API_V1_STR}/tickets",
    tags=["Tickets"]
)

app.include_router(
    reviews_module.router,
    prefix=f"{settings.API_V1_STR}/reviews",
    tags=["Reviews"]
)

app.include_router(
    highlights_module.router,
    prefix=f"{settings.API_V1_STR}/highlights",
    tags=["Highlights"]
)

app.include_router(
    itineraries_module.router,
    prefix=f"{settings.API_V1_STR}/itineraries",
    tags=["Itineraries"]
)

app.include_router(
    friends_module.router,
    prefix=f"{settings.API_V1_STR}/friends",
    tags=["Friends"]
)

app.include_router(
    friends_module.calendar_router,
    prefix=f"{settings.API_V1_STR}/calendar",
    tags=["Calendar"]
)

app.include_router(
    explore_module.router,
    prefix=settings.API_V1_STR,
    tags=["Explore"]
)

# Admin
app.include_router(
    experiences_module.router,
    prefix=f"{settings.API_V1_STR}/admin/experiences",
    tags=["Admin Experiences"]
)

app.include_router(
    highlights_module.admin_router,
    prefix=f"{settings.API_V1_STR}/admin/highlights",
    tags=["Admin Highlights"]
)

app.include_router(
    reviews_module.admin_router,
    prefix=f"{settings.API_V1_STR}/admin/reviews",
    tags=["Admin Reviews"]
)

app.include_router(
    admin_module.router,
    prefix=f"{settings.API_V1_STR}/admin",
    tags=["Admin System"]
)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "MyPlan Experiences API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("myplan.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
