"""
Reading and writing the service/resource subset of Ballerina source.

The reader understands service blocks, resource blocks, their annotations and
resource parameters. Function bodies are skipped. The writer renders a
ServiceDefinition back into Ballerina using the same annotation style.
"""

import json
import logging
import re
from typing import Any

from .interfaces import BallerinaParseError
from .models import ParameterDefinition, ResourceDefinition, ServiceDefinition

LOGGER = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
# Parameter types supplied by the runtime rather than the caller.
IMPLICIT_TYPES = {"message", "http:Request", "http:Response", "http:Connection", "http:InRequest", "http:OutResponse"}
BODY_TYPES = {"json", "xml", "blob"}

_SERVICE = re.compile(r"\bservice\s*<\s*(\w+)\s*>\s*(\w+)\s*\{")
_RESOURCE = re.compile(r"\bresource\s+(\w+)\s*\(")
_ANNOTATION = re.compile(r"@\s*(\w+)\s*:\s*(\w+)")
_PARAM = re.compile(r"^([A-Za-z_][\w:]*(?:\[\])*)\s+([A-Za-z_]\w*)$")
_TOKEN = re.compile(
    r'\s*(?:(?P<string>"(?:[^"\\]|\\.)*")'
    r"|(?P<number>-?\d+(?:\.\d+)?)"
    r"|(?P<name>[A-Za-z_]\w*)"
    r"|(?P<punct>[{}\[\]:,]))"
)
_PATH_TEMPLATE = re.compile(r"\{(\w+)\}")
MAX_NESTING = 32


def _strip_comments(text: str) -> str:
    out: list[str] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            end = _string_end(text, i)
            out.append(text[i:end])
            i = end
        elif text.startswith("//", i):
            nl = text.find("\n", i)
            i = n if nl == -1 else nl
        elif text.startswith("/*", i):
            close = text.find("*/", i + 2)
            if close == -1:
                raise BallerinaParseError("unterminated block comment")
            out.append(" ")
            i = close + 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _string_end(text: str, start: int) -> int:
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return i + 1
        if text[i] == "\n":
            break
        i += 1
    raise BallerinaParseError(f"unterminated string literal at offset {start}")


def _mask_strings(text: str) -> str:
    """Blank out string contents so braces and keywords inside literals are ignored."""
    out: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == '"':
            end = _string_end(text, i)
            out.append('"' + "_" * (end - i - 2) + '"')
            i = end
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def _match_close(masked: str, open_idx: int) -> int:
    pairs = {"{": "}", "(": ")", "[": "]"}
    stack = [pairs[masked[open_idx]]]
    for i in range(open_idx + 1, len(masked)):
        ch = masked[i]
        if ch in pairs:
            stack.append(pairs[ch])
        elif ch in ")}]":
            if ch != stack.pop():
                raise BallerinaParseError(f"mismatched '{ch}' at offset {i}")
            if not stack:
                return i
    raise BallerinaParseError(f"unbalanced '{masked[open_idx]}' at offset {open_idx}")


def _tokenize(body: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    while pos < len(body):
        if body[pos:].strip() == "":
            break
        m = _TOKEN.match(body, pos)
        if not m:
            raise BallerinaParseError(f"malformed annotation value near {body[pos:pos + 20]!r}")
        kind = m.lastgroup or ""
        tokens.append((kind, m.group(kind)))
        pos = m.end()
    return tokens


def _decode_string(tok: str) -> str:
    try:
        return json.loads(tok)
    except ValueError as e:
        raise BallerinaParseError(f"invalid string literal {tok!r}: {e}") from e


def _parse_value(tokens: list[tuple[str, str]], pos: int, depth: int = 0) -> tuple[Any, int]:
    if depth > MAX_NESTING:
        raise BallerinaParseError(f"annotation value nested deeper than {MAX_NESTING} levels")
    if pos >= len(tokens):
        raise BallerinaParseError("unexpected end of annotation value")
    kind, tok = tokens[pos]
    if kind == "string":
        return _decode_string(tok), pos + 1
    if kind == "number":
        return (float(tok) if "." in tok else int(tok)), pos + 1
    if kind == "name":
        return {"true": True, "false": False, "null": None}.get(tok, tok), pos + 1
    if tok == "{":
        return _parse_record(tokens, pos, depth + 1)
    if tok == "[":
        items: list[Any] = []
        pos += 1
        if pos < len(tokens) and tokens[pos][1] == "]":
            return items, pos + 1
        while True:
            value, pos = _parse_value(tokens, pos, depth + 1)
            items.append(value)
            if pos >= len(tokens):
                raise BallerinaParseError("unterminated array in annotation")
            if tokens[pos][1] == "]":
                return items, pos + 1
            if tokens[pos][1] != ",":
                raise BallerinaParseError(f"expected ',' in array, got {tokens[pos][1]!r}")
            pos += 1
    raise BallerinaParseError(f"unexpected {tok!r} in annotation")


def _parse_record(tokens: list[tuple[str, str]], pos: int, depth: int = 0) -> tuple[dict[str, Any], int]:
    record: dict[str, Any] = {}
    pos += 1
    if pos < len(tokens) and tokens[pos][1] == "}":
        return record, pos + 1
    while True:
        if pos + 1 >= len(tokens):
            raise BallerinaParseError("unterminated record in annotation")
        kind, key = tokens[pos]
        if kind == "string":
            key = _decode_string(key)
        elif kind != "name":
            raise BallerinaParseError(f"expected field name, got {key!r}")
        if tokens[pos + 1][1] != ":":
            raise BallerinaParseError(f"expected ':' after {key!r}")
        record[key], pos = _parse_value(tokens, pos + 2, depth)
        if pos >= len(tokens):
            raise BallerinaParseError("unterminated record in annotation")
        if tokens[pos][1] == "}":
            return record, pos + 1
        if tokens[pos][1] != ",":
            raise BallerinaParseError(f"expected ',' in record, got {tokens[pos][1]!r}")
        pos += 1


def parse_annotation_body(body: str) -> dict[str, Any]:
    """Parse a `{ key: value, ... }` annotation body."""
    tokens = _tokenize(body)
    if not tokens:
        return {}
    value, pos = _parse_value(tokens, 0)
    if not isinstance(value, dict) or pos != len(tokens):
        raise BallerinaParseError(f"annotation body must be a record: {body.strip()!r}")
    return value


def _annotations_before(text: str, masked: str, start: int, end: int) -> dict[str, dict[str, Any]]:
    """Collect the run of annotations that immediately precedes offset `end`."""
    found: list[tuple[str, dict[str, Any], int, int]] = []
    pos = start
    while True:
        m = _ANNOTATION.search(masked, pos, end)
        if not m:
            break
        body_end = m.end()
        attrs: dict[str, Any] = {}
        brace = m.end() + (len(masked[m.end():end]) - len(masked[m.end():end].lstrip()))
        if brace < end and masked[brace] == "{":
            close = _match_close(masked, brace)
            attrs = parse_annotation_body(text[brace:close + 1])
            body_end = close + 1
        found.append((f"{m.group(1)}:{m.group(2)}", attrs, m.start(), body_end))
        pos = body_end

    chain: dict[str, dict[str, Any]] = {}
    boundary = end
    for key, attrs, a_start, a_end in reversed(found):
        if masked[a_end:boundary].strip():
            break
        chain[key] = attrs
        boundary = a_start
    return dict(reversed(list(chain.items())))


def _split_params(text: str, masked: str) -> list[tuple[str, str]]:
    parts: list[tuple[str, str]] = []
    depth = 0
    last = 0
    for i, ch in enumerate(masked):
        if ch in "({[":
            depth += 1
        elif ch in ")}]":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append((text[last:i], masked[last:i]))
            last = i + 1
    parts.append((text[last:], masked[last:]))
    return [(t, m) for t, m in parts if m.strip()]


def _parse_parameters(text: str, masked: str, path: str) -> list[ParameterDefinition]:
    templated = set(_PATH_TEMPLATE.findall(path))
    params: list[ParameterDefinition] = []
    for raw, raw_masked in _split_params(text, masked):
        decl_start = 0
        for m in _ANNOTATION.finditer(raw_masked):
            decl_start = m.end()
            rest = raw_masked[decl_start:].lstrip()
            if rest.startswith("{"):
                brace = len(raw_masked) - len(rest)
                decl_start = _match_close(raw_masked, brace) + 1
        annotations = _annotations_before(raw, raw_masked, 0, decl_start)
        decl = raw[decl_start:].strip()
        m = _PARAM.match(decl)
        if not m:
            raise BallerinaParseError(f"malformed resource parameter: {decl!r}")
        ptype, var = m.group(1), m.group(2)

        if "http:PathParam" in annotations:
            location, name = "path", annotations["http:PathParam"].get("value", var)
        elif "http:QueryParam" in annotations:
            location, name = "query", annotations["http:QueryParam"].get("value", var)
        elif "http:Body" in annotations or ptype in BODY_TYPES:
            location, name = "body", var
        elif ptype in IMPLICIT_TYPES or ":" in ptype:
            location, name = "implicit", var
        elif var in templated:
            location, name = "path", var
        else:
            location, name = "query", var
        params.append(ParameterDefinition(name=str(name), location=location, type=ptype))

    declared = {p.name for p in params if p.location == "path"}
    for name in _PATH_TEMPLATE.findall(path):
        if name not in declared:
            params.append(ParameterDefinition(name=name, location="path", type="string"))
            declared.add(name)
    return params


def _build_resource(name: str, annotations: dict[str, dict[str, Any]]) -> ResourceDefinition:
    resource = ResourceDefinition(name=name)
    config = annotations.get("http:resourceConfig", {})
    methods = [key.split(":", 1)[1] for key in annotations if key.startswith("http:") and key.split(":", 1)[1] in HTTP_METHODS]
    for method in config.get("methods", []) or []:
        if str(method).upper() not in methods:
            methods.append(str(method).upper())
    resource.methods = methods or ["GET"]
    path = annotations.get("http:Path", {}).get("value") or config.get("path")
    resource.path = str(path) if path else f"/{name}"
    summary = annotations.get("doc:Description", {}).get("value")
    if summary:
        resource.summary = str(summary)
    return resource


def _parse_service(text: str, masked: str, m: re.Match, body_end: int, annotations: dict[str, dict[str, Any]]) -> ServiceDefinition:
    protocol, name = m.group(1), m.group(2)
    config = annotations.get("http:configuration", {})
    service = ServiceDefinition(
        name=name,
        protocol=protocol,
        base_path=str(config.get("basePath") or f"/{name}"),
        info=dict(annotations.get("swagger:ServiceInfo", {})),
        annotations=annotations,
    )

    pos = m.end()
    while True:
        rm = _RESOURCE.search(masked, pos, body_end)
        if not rm:
            break
        res_annotations = _annotations_before(text, masked, pos, rm.start())
        paren = rm.end() - 1
        paren_close = _match_close(masked, paren)
        brace = paren_close + 1
        while brace < body_end and masked[brace].isspace():
            brace += 1
        if brace >= body_end or masked[brace] != "{":
            raise BallerinaParseError(f"expected body for resource {rm.group(1)!r}")
        resource_end = _match_close(masked, brace)

        resource = _build_resource(rm.group(1), res_annotations)
        resource.parameters = _parse_parameters(
            text[paren + 1:paren_close], masked[paren + 1:paren_close], resource.path
        )
        service.resources.append(resource)
        pos = resource_end + 1
    return service


def parse_services(source: str) -> list[ServiceDefinition]:
    """Parse every service definition in a Ballerina source file."""
    text = _strip_comments(source)
    masked = _mask_strings(text)

    services: list[ServiceDefinition] = []
    pos = 0
    while True:
        m = _SERVICE.search(masked, pos)
        if not m:
            break
        annotations = _annotations_before(text, masked, pos, m.start())
        body_end = _match_close(masked, m.end() - 1)
        services.append(_parse_service(text, masked, m, body_end, annotations))
        pos = body_end + 1

    # Catch stray braces outside service blocks.
    depth = 0
    for ch in masked:
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth < 0:
                raise BallerinaParseError("unbalanced '}' in source")
    if depth:
        raise BallerinaParseError("unbalanced '{' in source")

    if not services:
        raise BallerinaParseError("no service definitions found in ballerina source")
    LOGGER.debug("Parsed ballerina services: %s", [s.name for s in services])
    return services


def to_identifier(text: str, default: str = "service") -> str:
    words = [w for w in re.split(r"[^0-9A-Za-z]+", text or "") if w]
    if not words:
        return default
    ident = words[0][0].lower() + words[0][1:] + "".join(w[0].upper() + w[1:] for w in words[1:])
    if ident[0].isdigit():
        ident = "_" + ident
    return ident


def _render_record(attrs: dict[str, Any]) -> str:
    if not attrs:
        return "{}"
    fields = ", ".join(f"{k}:{_render_value(v)}" for k, v in attrs.items())
    return "{" + fields + "}"


def _render_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        return _render_record(value)
    if isinstance(value, list):
        return "[" + ", ".join(_render_value(v) for v in value) + "]"
    return json.dumps(str(value))


def render_service(service: ServiceDefinition) -> str:
    """Render a service definition as Ballerina source."""
    lines = ["import ballerina.net.http;", ""]
    if service.info:
        lines.append(f"@swagger:ServiceInfo {_render_record(service.info)}")
    lines.append(f"@http:configuration {_render_record({'basePath': service.base_path or '/'})}")
    lines.append(f"service<{service.protocol}> {service.name} {{")

    for resource in service.resources:
        lines.append("")
        if resource.summary:
            lines.append(f"    @doc:Description {_render_record({'value': resource.summary})}")
        for method in resource.methods:
            lines.append(f"    @http:{method} {{}}")
        lines.append(f"    @http:Path {_render_record({'value': resource.path})}")

        params = ["message m"]
        for p in resource.parameters:
            if p.location == "path":
                params.append(f"@http:PathParam {_render_record({'value': p.name})} {p.type} {to_identifier(p.name, 'param')}")
            elif p.location == "query":
                params.append(f"@http:QueryParam {_render_record({'value': p.name})} {p.type} {to_identifier(p.name, 'param')}")
        lines.append(f"    resource {resource.name} ({', '.join(params)}) {{")
        lines.append("        message response = {};")
        lines.append("        reply response;")
        lines.append("    }")
    lines.append("}")
    return "\n".join(lines) + "\n"
