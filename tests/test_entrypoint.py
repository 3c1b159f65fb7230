from unittest.mock import patch

from mechanism_engine import __main__ as entrypoint
from mechanism_engine import config
from mechanism_engine.main import app


def test_main_serves_the_app_with_uvicorn():
    with patch.object(entrypoint.uvicorn, "run") as mock_run:
        entrypoint.main()
    mock_run.assert_called_once_with(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower(),
    )


def test_default_bind():
    assert isinstance(config.PORT, int)
    assert config.HOST
