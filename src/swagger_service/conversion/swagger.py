import json
from typing import Any
from urllib.parse import urlparse

import yaml

from .ballerina import HTTP_METHODS, to_identifier
from .interfaces import SwaggerParseError
from .models import ParameterDefinition, ResourceDefinition, ServiceDefinition

# ballerina type -> (swagger type, format)
SWAGGER_TYPES: dict[str, tuple[str, str | None]] = {
    "string": ("string", None),
    "int": ("integer", "int64"),
    "float": ("number", "double"),
    "boolean": ("boolean", None),
}
BALLERINA_TYPES = {"string": "string", "integer": "int", "number": "float", "boolean": "boolean"}
DEFAULT_VERSION = "1.0.0"


def _swagger_parameter(param: ParameterDefinition) -> dict[str, Any]:
    if param.location == "body":
        return {"in": "body", "name": param.name, "required": True, "schema": {"type": "object"}}
    swagger_type, fmt = SWAGGER_TYPES.get(param.type, ("string", None))
    out: dict[str, Any] = {"in": param.location, "name": param.name}
    if param.location == "path":
        out["required"] = True
    out["type"] = swagger_type
    if fmt:
        out["format"] = fmt
    return out


def build_swagger(service: ServiceDefinition) -> dict[str, Any]:
    """Build a Swagger 2.0 document for one parsed service."""
    info: dict[str, Any] = {"title": service.name, "version": DEFAULT_VERSION}
    for key in ("title", "version", "description"):
        if service.info.get(key):
            info[key] = str(service.info[key])

    doc: dict[str, Any] = {"swagger": "2.0", "info": info}
    config = service.annotations.get("http:configuration", {})
    if config.get("host"):
        doc["host"] = f"{config['host']}:{config['port']}" if config.get("port") else str(config["host"])
    doc["basePath"] = service.base_path or "/"
    doc["schemes"] = ["http"]

    paths: dict[str, dict[str, Any]] = {}
    for resource in service.resources:
        item = paths.setdefault(resource.path, {})
        for method in resource.methods:
            operation: dict[str, Any] = {"operationId": resource.name}
            if resource.summary:
                operation["summary"] = resource.summary
            params = [_swagger_parameter(p) for p in resource.parameters if p.location != "implicit"]
            if params:
                operation["parameters"] = params
            operation["responses"] = {"200": {"description": "Successful"}}
            item[method.lower()] = operation
    doc["paths"] = paths
    return doc


def dump_swagger(doc: dict[str, Any]) -> str:
    return json.dumps(doc, indent=2)


def load_description(text: str) -> dict[str, Any] | None:
    """Load a Swagger/OpenAPI document from JSON or YAML text.

    Returns None when the text does not hold a description document.
    """
    try:
        doc = json.loads(text)
    except ValueError:
        try:
            doc = yaml.safe_load(text)
        except yaml.YAMLError:
            return None
    if not isinstance(doc, dict) or not ("swagger" in doc or "openapi" in doc):
        return None
    return doc


def _resolve(doc: dict[str, Any], node: Any) -> Any:
    if not isinstance(node, dict) or "$ref" not in node:
        return node
    ref = str(node["$ref"])
    if not ref.startswith("#/"):
        raise SwaggerParseError(f"unsupported reference {ref!r}")
    target: Any = doc
    for part in ref[2:].split("/"):
        if not isinstance(target, dict) or part not in target:
            raise SwaggerParseError(f"unresolvable reference {ref!r}")
        target = target[part]
    return target


def _base_path(doc: dict[str, Any]) -> str:
    if "swagger" in doc:
        return str(doc.get("basePath") or "/")
    servers = doc.get("servers") or []
    if servers and isinstance(servers[0], dict) and servers[0].get("url"):
        return urlparse(str(servers[0]["url"])).path or "/"
    return "/"


def _resource_parameters(doc: dict[str, Any], raw_params: list[Any]) -> list[ParameterDefinition]:
    params: list[ParameterDefinition] = []
    seen: set[tuple[str, str]] = set()
    for raw in raw_params:
        p = _resolve(doc, raw)
        if not isinstance(p, dict) or p.get("in") not in ("path", "query"):
            continue
        key = (str(p.get("in")), str(p.get("name")))
        if key in seen:
            continue
        seen.add(key)
        schema_type = p.get("type") or (_resolve(doc, p.get("schema")) or {}).get("type")
        params.append(
            ParameterDefinition(
                name=str(p.get("name")),
                location=str(p["in"]),
                type=BALLERINA_TYPES.get(str(schema_type), "string"),
            )
        )
    return params


def parse_description(doc: dict[str, Any]) -> ServiceDefinition:
    """Turn a loaded Swagger 2.0 / OpenAPI 3 document into a service model."""
    info = doc.get("info") if isinstance(doc.get("info"), dict) else {}
    service = ServiceDefinition(
        name=to_identifier(str(info.get("title", "")), "service"),
        base_path=_base_path(doc),
        info={k: info[k] for k in ("title", "version", "description") if info.get(k)},
    )

    paths = doc.get("paths") or {}
    if not isinstance(paths, dict):
        raise SwaggerParseError("'paths' must be a mapping")
    for path, item in paths.items():
        if not isinstance(item, dict):
            raise SwaggerParseError(f"path item for {path!r} must be a mapping")
        shared = item.get("parameters") or []
        for method, operation in item.items():
            if method.upper() not in HTTP_METHODS or not isinstance(operation, dict):
                continue
            name = to_identifier(str(operation.get("operationId") or f"{method} {path}"), "resource")
            resource = ResourceDefinition(name=name, methods=[method.upper()], path=str(path))
            resource.parameters = _resource_parameters(doc, list(operation.get("parameters") or []) + list(shared))
            summary = operation.get("summary")
            if summary:
                resource.summary = str(summary)
            service.resources.append(resource)
    return service
