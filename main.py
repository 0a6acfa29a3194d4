"""
Backend Entry Point
Run with: python main.py
Or: uvicorn app.main:app --reload
"""
import uvicorn

from app.core.config import get_settings


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.is_development)
