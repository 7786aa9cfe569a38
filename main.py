"""Main entry point for running the FastAPI application with auto-reload."""
import uvicorn

from recruit.config import settings

if __name__ == "__main__":
    print(f"Starting {settings.app_name} v{settings.version}")
    print(f"Environment: {settings.environment.value}")
    print(f"Database: {settings.db.url.split('@')[-1] if '@' in settings.db.url else 'SQLite'}")
    print(f"Redis: {'configured' if settings.redis.url else 'disabled (no rate limiting or caching)'}")
    print(f"Auto-reload: {'Enabled' if settings.debug else 'Disabled'}")
    print("-" * 50)

    uvicorn.run(
        "recruit.api:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        reload_dirs=["recruit", "scoring", "config"] if settings.debug else None,
        log_level=settings.logging.level.lower(),
    )
