"""
REST API resolver utility for the products Lambda handler.

This module provides the configured API Gateway REST resolver shared by all
product routes, with CORS and OpenAPI documentation support.
"""

from aws_lambda_powertools.event_handler import APIGatewayRestResolver, CORSConfig
from aws_lambda_powertools.event_handler.openapi.models import Tag

# API path constants
PRODUCTS_PATH = '/api/v1/products'
SWAGGER_PATH = '/swagger'

API_TITLE = 'Products API'
API_VERSION = '1.0.0'
API_DESCRIPTION = 'Product catalog CRUD with category and tag taxonomy validation'

# OpenAPI tags for documentation
PRODUCTS_TAG = Tag(name='Products', description='Product catalog operations')

cors_config = CORSConfig(
    allow_origin='*',
    max_age=600,
    allow_headers=['content-type', 'authorization'],
)

# Configure API Gateway REST resolver with OpenAPI support
app = APIGatewayRestResolver(
    cors=cors_config,
    enable_validation=True,
    debug=False,
)

app.enable_swagger(
    path=SWAGGER_PATH,
    title=API_TITLE,
    version=API_VERSION,
    description=API_DESCRIPTION,
    tags=[PRODUCTS_TAG],
)
