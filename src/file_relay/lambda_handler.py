"""Serverless handler for the File Relay using Mangum."""
from mangum import Mangum

from file_relay.config.settings import get_settings
from file_relay.main import create_app

# Create FastAPI app
app = create_app(get_settings())

# Wrap with Mangum for Lambda compatibility
handler = Mangum(app, lifespan="off")

# Export handler for Lambda runtime
lambda_handler = handler
