import uvicorn

from taskflow.settings import LogLevel, settings

# uvicorn has no NOTSET or FATAL level
UVICORN_LOG_LEVELS = {
    LogLevel.NOTSET: "trace",
    LogLevel.FATAL: "critical",
}


def main() -> None:
    """Entrypoint of the application."""
    uvicorn.run(
        "taskflow.web.application:get_app",
        workers=settings.workers_count,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=UVICORN_LOG_LEVELS.get(
            settings.log_level, settings.log_level.value.lower(),
        ),
        factory=True,
    )


if __name__ == "__main__":
    main()
