"""
Chalo India Chatbot Configuration
Loads settings from environment variables
"""

import os
from pathlib import Path
from typing import List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings:
    """Application settings loaded from environment"""

    def __init__(self):
        # API Configuration
        self.API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
        self.API_PORT: int = int(os.getenv("API_PORT", "3000"))
        self.API_ENV: str = os.getenv("API_ENV", "development")

        # CORS Configuration
        self.CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

        # Data locations
        self.DATA_DIR: str = os.getenv("DATA_DIR", str(BASE_DIR / "data"))
        self.DEALS_FILE: str = os.getenv("DEALS_FILE", os.path.join(self.DATA_DIR, "deals", "deals.json"))
        self.BOOKINGS_DIR: str = os.getenv("BOOKINGS_DIR", os.path.join(self.DATA_DIR, "bookings"))
        self.DOCUMENTS_DIR: str = os.getenv("DOCUMENTS_DIR", os.path.join(self.DATA_DIR, "pdfs"))
        self.FRONTEND_DIR: str = os.getenv("FRONTEND_DIR", str(BASE_DIR / "frontend"))

        # Session storage: "memory" or "redis"
        self.SESSION_BACKEND: str = os.getenv("SESSION_BACKEND", "memory").lower()
        self.SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "0"))

        # Redis Configuration
        self.REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
        self.REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
        self.REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))

        # LLM Configuration
        self.OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
        self.OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
        self.OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
        self.OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.2")
        self.LLM_TIMEOUT: float = float(os.getenv("LLM_TIMEOUT", "60"))
        self.LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.7"))

        # Deals
        self.MAX_DEAL_RESULTS: int = int(os.getenv("MAX_DEAL_RESULTS", "10"))

    @property
    def use_openai(self) -> bool:
        return bool(self.OPENAI_API_KEY)

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def redis_url(self) -> str:
        """Get Redis connection URL"""
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


# Global settings instance
settings = Settings()
