import pytest

HELLO_SOURCE = '''import ballerina.net.http;

// Greeting service
@http:configuration {basePath:"/hello", host:"localhost", port:9090}
service<http> helloService {

    @http:GET {}
    @http:Path {value:"/sayHello"}
    resource sayHello (message m) {
        message response = {};
        messages:setStringPayload(response, "Hello, World! {not a brace}");
        reply response;
    }

    /* update a user */
    @http:POST {}
    @http:Path {value:"/users/{id}"}
    resource updateUser (message m, @http:PathParam {value:"id"} string id, @http:QueryParam {value:"verbose"} boolean verbose) {
        reply m;
    }
}

service<http> echoService {
    resource echo (message m) {
        reply m;
    }
}
'''

PETSTORE_YAML = '''swagger: "2.0"
info:
  title: Pet Store
  version: "2.1"
basePath: /v1
paths:
  /pets/{petId}:
    parameters:
      - name: petId
        in: path
        required: true
        type: integer
    get:
      operationId: getPet
      summary: Find pet
      parameters:
        - name: fields
          in: query
          type: string
    delete:
      responses: {}
'''


@pytest.fixture
def hello_source() -> str:
    return HELLO_SOURCE


@pytest.fixture
def petstore_yaml() -> str:
    return PETSTORE_YAML
