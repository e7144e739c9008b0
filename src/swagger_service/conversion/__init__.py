"""
Domain layer for swagger conversion.
Provides the converter gateway, the Ballerina and Swagger readers/writers, and
a service applying the conversion rules so front-ends (HTTP or others) can
use the same core logic.
"""

from .interfaces import BallerinaParseError, ConversionError, ConverterGateway, SwaggerParseError
from .models import ServiceDefinitionContainer
from .service import ConversionResult, Outcome, SwaggerConversionService
