from mangum import Mangum

from file_relay.config.settings import get_settings


def test_lambda_handler_wraps_the_app():
    get_settings.cache_clear()
    from file_relay import lambda_handler

    assert isinstance(lambda_handler.handler, Mangum)
    assert lambda_handler.lambda_handler is lambda_handler.handler
    assert "/api/upload" in lambda_handler.app.openapi()["paths"]
    get_settings.cache_clear()
