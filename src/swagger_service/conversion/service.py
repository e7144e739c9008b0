import logging
from dataclasses import dataclass

from .interfaces import ConversionError, ConverterGateway
from .models import ServiceDefinitionContainer

LOGGER = logging.getLogger(__name__)

MISSING_SOURCE_MESSAGE = "Please provide valid ballerina source."
MISSING_DESCRIPTION_MESSAGE = "Please provide valid swagger source."


class Outcome:
    OK = "ok"
    MISSING_INPUT = "missing_input"
    FAILED = "failed"


@dataclass
class ConversionResult:
    outcome: str
    container: ServiceDefinitionContainer
    message: str | None = None


def describe_error(exc: BaseException) -> str:
    return f"{exc.__class__.__name__}: {exc}"


class SwaggerConversionService:
    """Applies the conversion rules for both directions.

    This service is framework-agnostic: it mutates the container and reports
    an outcome, leaving status codes and headers to the HTTP controller.
    """

    def __init__(self, converter: ConverterGateway) -> None:
        self._converter = converter

    def to_swagger(self, container: ServiceDefinitionContainer, service_name: str | None = None) -> ConversionResult:
        try:
            swagger = self._converter.source_to_description(container.ballerina_definition, service_name)
        except ConversionError as e:
            LOGGER.error("Error while processing service definition at converter service: %s", e)
            return ConversionResult(Outcome.FAILED, container, describe_error(e))
        container.swagger_definition = swagger
        LOGGER.debug("Generated swagger definition (%d chars)", len(swagger))
        return ConversionResult(Outcome.OK, container)

    def to_ballerina(self, container: ServiceDefinitionContainer) -> ConversionResult:
        ballerina = container.ballerina_definition
        swagger = container.swagger_definition
        if not ballerina:
            return ConversionResult(Outcome.MISSING_INPUT, container, MISSING_SOURCE_MESSAGE)
        if not swagger:
            return ConversionResult(Outcome.MISSING_INPUT, container, MISSING_DESCRIPTION_MESSAGE)
        try:
            # The generated source is not written back; the container is echoed as received.
            self._converter.description_to_source(ballerina)
        except Exception as e:
            LOGGER.error("Error while processing service definition at converter service: %s", e)
            return ConversionResult(Outcome.FAILED, container, describe_error(e))
        return ConversionResult(Outcome.OK, container)
