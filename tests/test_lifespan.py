import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from taskflow import __main__ as entrypoint
from taskflow.settings import LogLevel, settings
from taskflow.web import lifespan


class RecordingInstrumentor:
    """Stands in for an OpenTelemetry instrumentor and remembers its calls."""

    calls = []

    def instrument(self, **kwargs):
        self.calls.append((type(self).__name__, "instrument", kwargs))

    def uninstrument(self, **kwargs):
        self.calls.append((type(self).__name__, "uninstrument", kwargs))

    def instrument_app(self, app, **kwargs):
        self.calls.append((type(self).__name__, "instrument_app", kwargs))

    def uninstrument_app(self, app):
        self.calls.append((type(self).__name__, "uninstrument_app", {}))


class FakeFastAPIInstrumentor(RecordingInstrumentor):
    pass


class FakeSQLAlchemyInstrumentor(RecordingInstrumentor):
    pass


class FakeLoggingInstrumentor(RecordingInstrumentor):
    pass


class _FakeTracerProvider:
    def __init__(self, resource):
        self.resource = resource

    def add_span_processor(self, processor):
        pass


@pytest.fixture
def traced_app(
    monkeypatch: pytest.MonkeyPatch, fastapi_app: FastAPI, _engine: AsyncEngine,
) -> FastAPI:
    RecordingInstrumentor.calls = []
    monkeypatch.setattr(settings, "opentelemetry_endpoint", "http://localhost:4317")
    monkeypatch.setattr(lifespan, "FastAPIInstrumentor", FakeFastAPIInstrumentor)
    monkeypatch.setattr(lifespan, "SQLAlchemyInstrumentor", FakeSQLAlchemyInstrumentor)
    monkeypatch.setattr(lifespan, "LoggingInstrumentor", FakeLoggingInstrumentor)
    monkeypatch.setattr(lifespan, "BatchSpanProcessor", lambda exporter: exporter)
    monkeypatch.setattr(lifespan, "OTLPSpanExporter", lambda **kwargs: object())
    monkeypatch.setattr(lifespan, "TracerProvider", _FakeTracerProvider)
    monkeypatch.setattr(lifespan, "set_tracer_provider", lambda tracer_provider: None)
    fastapi_app.state.db_engine = _engine
    return fastapi_app


@pytest.mark.anyio
async def test_tracing_covers_database_and_logging(traced_app: FastAPI, _engine) -> None:
    lifespan.setup_opentelemetry(traced_app)

    calls = {(name, action): kwargs for name, action, kwargs in RecordingInstrumentor.calls}
    assert ("FakeFastAPIInstrumentor", "instrument_app") in calls
    assert calls[("FakeSQLAlchemyInstrumentor", "instrument")]["engine"] is _engine.sync_engine
    assert calls[("FakeLoggingInstrumentor", "instrument")]["set_logging_format"] is True


@pytest.mark.anyio
async def test_tracing_is_undone_on_shutdown(traced_app: FastAPI) -> None:
    lifespan.stop_opentelemetry(traced_app)

    actions = {(name, action) for name, action, _ in RecordingInstrumentor.calls}
    assert actions == {
        ("FakeFastAPIInstrumentor", "uninstrument_app"),
        ("FakeSQLAlchemyInstrumentor", "uninstrument"),
        ("FakeLoggingInstrumentor", "uninstrument"),
    }


def test_tracing_off_without_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    RecordingInstrumentor.calls = []
    monkeypatch.setattr(settings, "opentelemetry_endpoint", None)
    monkeypatch.setattr(lifespan, "SQLAlchemyInstrumentor", FakeSQLAlchemyInstrumentor)

    lifespan.setup_opentelemetry(FastAPI())

    assert RecordingInstrumentor.calls == []


@pytest.mark.parametrize(
    "level,expected",
    [
        (LogLevel.NOTSET, "trace"),
        (LogLevel.DEBUG, "debug"),
        (LogLevel.INFO, "info"),
        (LogLevel.WARNING, "warning"),
        (LogLevel.ERROR, "error"),
        (LogLevel.FATAL, "critical"),
    ],
)
def test_uvicorn_gets_a_level_it_knows(
    monkeypatch: pytest.MonkeyPatch, level, expected,
) -> None:
    seen = {}
    monkeypatch.setattr(settings, "log_level", level)
    monkeypatch.setattr(entrypoint.uvicorn, "run", lambda *args, **kwargs: seen.update(kwargs))

    entrypoint.main()

    assert seen["log_level"] == expected
    assert seen["factory"] is True
