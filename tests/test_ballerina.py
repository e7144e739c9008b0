import pytest

from swagger_service.conversion.ballerina import parse_annotation_body, parse_services, render_service, to_identifier
from swagger_service.conversion.interfaces import BallerinaParseError, ConversionError


def test_parse_services_reads_services_and_resources(hello_source):
    services = parse_services(hello_source)

    assert [s.name for s in services] == ["helloService", "echoService"]
    hello = services[0]
    assert hello.protocol == "http"
    assert hello.base_path == "/hello"
    assert hello.annotations["http:configuration"] == {"basePath": "/hello", "host": "localhost", "port": 9090}
    assert [(r.name, r.methods, r.path) for r in hello.resources] == [
        ("sayHello", ["GET"], "/sayHello"),
        ("updateUser", ["POST"], "/users/{id}"),
    ]


def test_parse_services_reads_annotated_parameters(hello_source):
    update = parse_services(hello_source)[0].resources[1]

    assert [(p.name, p.location, p.type) for p in update.parameters] == [
        ("m", "implicit", "message"),
        ("id", "path", "string"),
        ("verbose", "query", "boolean"),
    ]


def test_parse_services_applies_defaults(hello_source):
    echo = parse_services(hello_source)[1]

    assert echo.base_path == "/echoService"
    assert echo.annotations == {}
    assert echo.resources[0].methods == ["GET"]
    assert echo.resources[0].path == "/echo"


def test_resource_config_annotation_and_path_templates():
    source = '''
@http:configuration {basePath:"/orders"}
service<http> orderService {
    @http:resourceConfig {
        methods:["GET", "HEAD"],
        path:"/{orderId}/lines/{lineNo}"
    }
    @doc:Description {value:"Fetch an order"}
    resource findOrder (http:Request req, http:Response res, string orderId) {
    }
}
'''
    resource = parse_services(source)[0].resources[0]

    assert resource.methods == ["GET", "HEAD"]
    assert resource.path == "/{orderId}/lines/{lineNo}"
    assert resource.summary == "Fetch an order"
    assert [(p.name, p.location) for p in resource.parameters] == [
        ("req", "implicit"),
        ("res", "implicit"),
        ("orderId", "path"),
        ("lineNo", "path"),
    ]


@pytest.mark.parametrize(
    "source",
    [
        "this is not ballerina",
        "service<http> broken {\n    resource r (message m) {\n        reply m;\n    }\n",
        'service<http> s {\n    resource r (message m {\n    }\n}\n',
        'service<http> s { resource r (message m) { string x = "unterminated; } }',
        "/* never closed\nservice<http> s {}",
        "@http:configuration {basePath:}\nservice<http> s {}",
        '@http:configuration {basePath:"/a\\d"}\nservice<http> s {}',
        "@http:configuration {a:" + "[" * 3000 + "]" * 3000 + "}\nservice<http> s {}",
    ],
)
def test_parse_services_rejects_malformed_source(source):
    with pytest.raises(BallerinaParseError):
        parse_services(source)


def test_parse_error_is_a_conversion_error():
    assert issubclass(BallerinaParseError, ConversionError)


def test_parse_annotation_body_handles_nested_values():
    body = '{path:"/x", methods:["GET"], secure:false, retries:3, ratio:0.5, extra:{"k":"v"}}'

    assert parse_annotation_body(body) == {
        "path": "/x",
        "methods": ["GET"],
        "secure": False,
        "retries": 3,
        "ratio": 0.5,
        "extra": {"k": "v"},
    }
    assert parse_annotation_body("{}") == {}


def test_to_identifier():
    assert to_identifier("Pet Store") == "petStore"
    assert to_identifier("get /pets/{petId}") == "getPetsPetId"
    assert to_identifier("3d printer") == "_3dPrinter"
    assert to_identifier("!!!", "fallback") == "fallback"


def test_render_service_output_parses_back(hello_source):
    service = parse_services(hello_source)[0]

    rendered = render_service(service)
    reparsed = parse_services(rendered)[0]

    assert 'service<http> helloService {' in rendered
    assert '@http:PathParam {value:"id"} string id' in rendered
    assert reparsed.base_path == "/hello"
    assert [(r.name, r.methods, r.path) for r in reparsed.resources] == [
        ("sayHello", ["GET"], "/sayHello"),
        ("updateUser", ["POST"], "/users/{id}"),
    ]
