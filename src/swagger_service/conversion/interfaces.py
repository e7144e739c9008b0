from typing import Protocol


class ConversionError(Exception):
    """Raised when a definition cannot be converted."""


class BallerinaParseError(ConversionError):
    pass


class SwaggerParseError(ConversionError):
    pass


class ConverterGateway(Protocol):
    def source_to_description(self, source: str | None, service_name: str | None = None) -> str:
        """Generate a Swagger document (as text) from Ballerina source.

        Raises ConversionError when the source is missing, malformed, or does
        not contain the requested service.
        """

    def description_to_source(self, description: str) -> str | None:
        """Generate Ballerina source from a Swagger/OpenAPI document.

        Returns None when the text is not a recognisable description document.
        """
