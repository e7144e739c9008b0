import logging

from .ballerina import parse_services, render_service
from .interfaces import ConversionError, ConverterGateway
from .swagger import build_swagger, dump_swagger, load_description, parse_description

LOGGER = logging.getLogger(__name__)


class BallerinaSwaggerConverter(ConverterGateway):
    def source_to_description(self, source: str | None, service_name: str | None = None) -> str:
        if source is None:
            raise ConversionError("ballerina source is required")
        services = parse_services(source)
        if service_name:
            matches = [s for s in services if s.name == service_name]
            if not matches:
                raise ConversionError(f"service {service_name!r} not found in ballerina source")
            service = matches[0]
        else:
            service = services[0]
        LOGGER.debug("Generating swagger for service %s", service.name)
        return dump_swagger(build_swagger(service))

    def description_to_source(self, description: str) -> str | None:
        doc = load_description(description)
        if doc is None:
            return None
        return render_service(parse_description(doc))
