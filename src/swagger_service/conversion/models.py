from dataclasses import dataclass, field
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Original wire names first, generic names second.
WIRE_NAMES = {
    "ballerina": ("ballerinaDefinition", "swaggerDefinition"),
    "generic": ("sourceText", "descriptionText"),
}


class ServiceDefinitionContainer(BaseModel):
    """Request/response payload pairing Ballerina source and Swagger text."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ballerina_definition: str | None = Field(
        None, validation_alias=AliasChoices("ballerinaDefinition", "sourceText")
    )
    swagger_definition: str | None = Field(
        None, validation_alias=AliasChoices("swaggerDefinition", "descriptionText")
    )

    @staticmethod
    def naming_of(payload: dict[str, Any]) -> str:
        if any(k in payload for k in WIRE_NAMES["generic"]) and not any(
            k in payload for k in WIRE_NAMES["ballerina"]
        ):
            return "generic"
        return "ballerina"

    def to_payload(self, naming: str = "ballerina") -> dict[str, str | None]:
        source_key, description_key = WIRE_NAMES[naming]
        return {source_key: self.ballerina_definition, description_key: self.swagger_definition}


@dataclass
class ParameterDefinition:
    name: str
    location: str  # path | query | body | implicit
    type: str = "string"


@dataclass
class ResourceDefinition:
    name: str
    methods: list[str] = field(default_factory=list)
    path: str = ""
    parameters: list[ParameterDefinition] = field(default_factory=list)
    summary: str | None = None


@dataclass
class ServiceDefinition:
    name: str
    protocol: str = "http"
    base_path: str = ""
    info: dict[str, Any] = field(default_factory=dict)
    annotations: dict[str, dict[str, Any]] = field(default_factory=dict)
    resources: list[ResourceDefinition] = field(default_factory=list)
