from swagger_service.conversion import (
    BallerinaParseError,
    Outcome,
    ServiceDefinitionContainer,
    SwaggerConversionService,
)


class _StubConverter:
    def __init__(self, swagger="{}", error=None):
        self.swagger = swagger
        self.error = error
        self.calls = []

    def source_to_description(self, source, service_name=None):
        self.calls.append(("to_swagger", source, service_name))
        if self.error:
            raise self.error
        return self.swagger

    def description_to_source(self, description):
        self.calls.append(("to_ballerina", description))
        if self.error:
            raise self.error
        return "service<http> generated {}"


def test_to_swagger_sets_description():
    converter = _StubConverter(swagger='{"swagger": "2.0"}')
    container = ServiceDefinitionContainer(ballerina_definition="service<http> s {}")

    result = SwaggerConversionService(converter).to_swagger(container, "s")

    assert result.outcome == Outcome.OK
    assert result.container.swagger_definition == '{"swagger": "2.0"}'
    assert converter.calls == [("to_swagger", "service<http> s {}", "s")]


def test_to_swagger_reports_conversion_error():
    converter = _StubConverter(error=BallerinaParseError("no service definitions found"))
    container = ServiceDefinitionContainer(ballerina_definition="junk")

    result = SwaggerConversionService(converter).to_swagger(container)

    assert result.outcome == Outcome.FAILED
    assert result.message == "BallerinaParseError: no service definitions found"
    assert container.swagger_definition is None


def test_to_ballerina_requires_both_texts():
    converter = _StubConverter()
    service = SwaggerConversionService(converter)

    no_source = service.to_ballerina(ServiceDefinitionContainer(swagger_definition="swagger: '2.0'"))
    no_swagger = service.to_ballerina(ServiceDefinitionContainer(ballerina_definition="service<http> s {}", swagger_definition=""))

    assert (no_source.outcome, no_source.message) == (Outcome.MISSING_INPUT, "Please provide valid ballerina source.")
    assert (no_swagger.outcome, no_swagger.message) == (Outcome.MISSING_INPUT, "Please provide valid swagger source.")
    assert converter.calls == []


def test_to_ballerina_passes_source_and_leaves_container_untouched():
    converter = _StubConverter()
    container = ServiceDefinitionContainer(ballerina_definition="service<http> s {}", swagger_definition="swagger: '2.0'")

    result = SwaggerConversionService(converter).to_ballerina(container)

    assert result.outcome == Outcome.OK
    assert converter.calls == [("to_ballerina", "service<http> s {}")]
    assert result.container.ballerina_definition == "service<http> s {}"
    assert result.container.swagger_definition == "swagger: '2.0'"


def test_to_ballerina_catches_any_exception():
    converter = _StubConverter(error=RuntimeError("boom"))
    container = ServiceDefinitionContainer(ballerina_definition="a", swagger_definition="b")

    result = SwaggerConversionService(converter).to_ballerina(container)

    assert result.outcome == Outcome.FAILED
    assert result.message == "RuntimeError: boom"


def test_container_accepts_both_namings():
    original = ServiceDefinitionContainer.model_validate({"ballerinaDefinition": "a", "swaggerDefinition": "b"})
    generic = ServiceDefinitionContainer.model_validate({"sourceText": "a", "descriptionText": "b"})

    assert original == generic
    assert ServiceDefinitionContainer.naming_of({"sourceText": "a"}) == "generic"
    assert ServiceDefinitionContainer.naming_of({"ballerinaDefinition": "a"}) == "ballerina"
    assert generic.to_payload("generic") == {"sourceText": "a", "descriptionText": "b"}
