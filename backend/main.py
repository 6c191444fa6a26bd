# backend/main.py
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

load_dotenv()

from config import settings
from database import init_db
from utils.storage import UPLOAD_ROOT, ensure_buckets

# Routers
from routes.auth import router as auth_router
from routes.staff import router as staff_router
from routes.departments import router as departments_router
from routes.categories import router as categories_router
from routes.nominations import router as nominations_router
from routes.votes import router as votes_router
from routes.results import router as results_router
from routes.analytics import router as analytics_router
from routes.feedback import router as feedback_router
from routes.logs import router as logs_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Initialisation
init_db()

app = FastAPI(title="Staff Awards API", version="1.0.0")

# Uploads: category images and staff avatars
ensure_buckets()
app.mount("/uploads", StaticFiles(directory=str(UPLOAD_ROOT)), name="uploads")

# CORS: local dev servers plus the configured frontend
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router registration
app.include_router(auth_router)
app.include_router(staff_router)
app.include_router(departments_router)
app.include_router(categories_router)
app.include_router(nominations_router)
app.include_router(votes_router)
app.include_router(results_router)
app.include_router(analytics_router)
app.include_router(feedback_router)
app.include_router(logs_router)


@app.get("/")
def read_root():
    return {"message": "Staff Awards API is running"}
