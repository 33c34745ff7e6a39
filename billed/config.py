# billed/config.py
import os

class Settings:
    def __init__(self):
        # Base URL of the bills API the Store client talks to
        self.API_URL = os.getenv("API_URL", "http://localhost:5678")
        self.API_TIMEOUT = float(os.getenv("API_TIMEOUT", "10"))
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./billed.db")
        self.UPLOAD_DIR = os.getenv("UPLOAD_DIR", "./public")
        self.PUBLIC_URL = os.getenv("PUBLIC_URL", "http://localhost:5678/public")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()
API_URL = settings.API_URL
DATABASE_URL = settings.DATABASE_URL
UPLOAD_DIR = settings.UPLOAD_DIR
