"""Data models for API Gateway declarations and remote state."""

from dataclasses import dataclass, field
from typing import Any, Optional

from .exceptions import DeployConfigError
from .utils import HTTP_METHODS

PATH_MARKER = "/"


def _require_mapping(value: Any, where: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DeployConfigError(f"{where} must be a mapping")
    return value


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _validate_segment(segment: str, where: str) -> None:
    path_part = segment[1:]
    if not path_part or PATH_MARKER in path_part:
        raise DeployConfigError(
            f"Invalid path segment {segment!r} in {where}: expected '/' followed "
            "by a single path part"
        )


@dataclass
class ResponseSpec:
    """Declared method response and integration response for one status code."""

    response_models: Optional[dict[str, str]] = None
    """Content type to model name"""

    response_parameters: Optional[dict[str, Any]] = None
    """Destination to mapping expression (or flag)"""

    response_templates: Optional[dict[str, str]] = None
    """Content type to mapping template"""

    selection_pattern: Optional[str] = None
    """Regex matching backend responses to this status"""

    @classmethod
    def from_dict(cls, data: Any, where: str = "response") -> "ResponseSpec":
        data = _require_mapping(data, where)
        parameters = data.get("responseParameters")
        if parameters is not None:
            parameters = _require_mapping(parameters, f"{where} responseParameters")
        return cls(
            response_models=data.get("responseModels"),
            response_parameters=parameters,
            response_templates=data.get("responseTemplates"),
            selection_pattern=data.get("selectionPattern") or None,
        )


@dataclass
class IntegrationSpec:
    """Declared integration request of a method."""

    type: str
    """Integration type (AWS, AWS_PROXY, HTTP, HTTP_PROXY, MOCK)"""

    integration_http_method: str = "POST"
    uri: Optional[str] = None
    request_templates: dict[str, str] = field(default_factory=dict)
    request_parameters: dict[str, str] = field(default_factory=dict)
    credentials: Optional[str] = None
    cache_namespace: Optional[str] = None
    cache_key_parameters: list[str] = field(default_factory=list)

    @property
    def is_mock(self) -> bool:
        return self.type.upper() == "MOCK"

    @classmethod
    def from_dict(cls, data: Any, where: str = "integration") -> "IntegrationSpec":
        if data is None:
            raise DeployConfigError(f"Missing integration in {where}")
        data = _require_mapping(data, where)

        integration_type = data.get("type")
        if not integration_type:
            raise DeployConfigError(f"Missing integration type in {where}")

        spec = cls(
            type=integration_type,
            integration_http_method=data.get("integrationHttpMethod") or "POST",
            uri=data.get("uri") or None,
            request_templates=_require_mapping(
                data.get("requestTemplates"), f"{where} requestTemplates"
            ),
            request_parameters=_require_mapping(
                data.get("requestParameters"), f"{where} requestParameters"
            ),
            credentials=data.get("credentials") or None,
            cache_namespace=data.get("cacheNamespace") or None,
            cache_key_parameters=list(data.get("cacheKeyParameters") or []),
        )
        if not spec.is_mock and not spec.uri:
            raise DeployConfigError(
                f"Missing integration uri in {where} (required for type {spec.type})"
            )
        return spec


@dataclass
class MethodSpec:
    """Declared method request with its integration and responses."""

    integration: IntegrationSpec
    authorization_type: str = "NONE"
    api_key_required: bool = False
    responses: dict[str, ResponseSpec] = field(default_factory=dict)
    """Status code to response, in declared order"""

    @classmethod
    def from_dict(cls, data: Any, where: str = "method") -> "MethodSpec":
        data = _require_mapping(data, where)
        responses = {
            str(status): ResponseSpec.from_dict(
                response, f"{where} response {status}"
            )
            for status, response in _require_mapping(
                data.get("responses"), f"{where} responses"
            ).items()
        }
        return cls(
            integration=IntegrationSpec.from_dict(data.get("integration"), where),
            authorization_type=data.get("authorizationType") or "NONE",
            api_key_required=bool(data.get("apiKeyRequired", False)),
            responses=responses,
        )


@dataclass
class DesiredNode:
    """One resource of the declared tree.

    ``path`` is the segment as declared (e.g. "/items"); the root of a
    declaration has an empty path and only children.
    """

    path: str
    methods: dict[str, MethodSpec] = field(default_factory=dict)
    children: dict[str, "DesiredNode"] = field(default_factory=dict)

    @property
    def path_part(self) -> str:
        """Segment without the leading slash, as sent to the control plane."""
        return self.path[1:]

    def walk(self, prefix: str = ""):
        """Yield (full_path, node) for every descendant, depth-first."""
        for segment, child in self.children.items():
            full_path = f"{prefix}{segment}"
            yield full_path, child
            yield from child.walk(full_path)

    @classmethod
    def from_dict(cls, path: str, data: Any, where: str = "") -> "DesiredNode":
        where = where or path or "resources"
        data = _require_mapping(data, where)

        methods: dict[str, MethodSpec] = {}
        children: dict[str, DesiredNode] = {}

        for key, value in data.items():
            if key == "methods":
                for verb, method in _require_mapping(
                    value, f"{where} methods"
                ).items():
                    http_method = str(verb).upper()
                    if http_method not in HTTP_METHODS:
                        raise DeployConfigError(
                            f"Unsupported HTTP method {verb!r} in {where}"
                        )
                    methods[http_method] = MethodSpec.from_dict(
                        method, f"{http_method} {where}"
                    )
            elif isinstance(key, str) and key.startswith(PATH_MARKER):
                _validate_segment(key, where)
                child_path = f"{path}{key}" if path else key
                children[key] = cls.from_dict(key, value, child_path)
            else:
                raise DeployConfigError(f"Unknown key {key!r} in {where}")

        return cls(path=path, methods=methods, children=children)

    @classmethod
    def root(cls, resources: Any) -> "DesiredNode":
        """Build the anchor node holding the top-level resources."""
        resources = _require_mapping(resources, "resources")
        node = cls.from_dict("", resources, "resources")
        if node.methods:
            raise DeployConfigError(
                "Methods on the root resource are not supported; declare them "
                "under a path segment"
            )
        return node


@dataclass
class DeploymentSpec:
    """Declared deployment stage."""

    stage_name: str
    cache_cluster_enabled: bool = False
    cache_cluster_size: Optional[str] = None
    description: str = ""
    stage_description: str = ""
    variables: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, where: str = "deployment") -> "DeploymentSpec":
        data = _require_mapping(data, where)
        stage_name = data.get("stageName")
        if not stage_name:
            raise DeployConfigError(f"Missing stageName in {where}")
        return cls(
            stage_name=stage_name,
            cache_cluster_enabled=bool(data.get("cacheClusterEnabled", False)),
            cache_cluster_size=_optional_str(data.get("cacheClusterSize")),
            description=data.get("description") or "",
            stage_description=data.get("stageDescription") or "",
            variables=_require_mapping(data.get("variables"), f"{where} variables"),
        )


@dataclass
class RemoteResource:
    """Snapshot of a resource as reported by the control plane."""

    id: str
    path: str
    parent_id: Optional[str] = None
    path_part: Optional[str] = None

    @property
    def is_root(self) -> bool:
        return self.path == "/"

    @classmethod
    def from_api(cls, item: dict) -> "RemoteResource":
        return cls(
            id=item["id"],
            path=item.get("path", ""),
            parent_id=item.get("parentId"),
            path_part=item.get("pathPart"),
        )


@dataclass
class ConnectionOptions:
    """Credential and region options of a deploy target."""

    profile: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    credentials_json: Optional[str] = None
    region: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, where: str = "options") -> "ConnectionOptions":
        data = _require_mapping(data, where)
        return cls(
            profile=data.get("profile") or None,
            access_key_id=data.get("accessKeyId") or None,
            secret_access_key=data.get("secretAccessKey") or None,
            credentials_json=data.get("credentialsJSON") or None,
            region=data.get("region") or None,
        )

    def merged(self, **overrides: Optional[str]) -> "ConnectionOptions":
        """Return a copy where non-empty overrides replace file values."""
        values = {
            "profile": self.profile,
            "access_key_id": self.access_key_id,
            "secret_access_key": self.secret_access_key,
            "credentials_json": self.credentials_json,
            "region": self.region,
        }
        values.update({key: value for key, value in overrides.items() if value})
        return ConnectionOptions(**values)


@dataclass
class DeployTarget:
    """A named deployment: which API, what tree, which stage."""

    name: str
    rest_api_id: str
    resources: DesiredNode
    deployment: DeploymentSpec
    options: ConnectionOptions = field(default_factory=ConnectionOptions)
