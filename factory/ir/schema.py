# FILE: factory/ir/schema.py
"""
IR (Intermediate Representation) schema.

The IR is the structured specification compiled from a free-text brief.
Downstream prompt-assembly and agent-selection key off these field names
(``app.stack.backend.language``, ``data.entities[].fields`` ...), so they are
part of the external contract and must stay stable.

All models serialize with ``to_dict()`` which dumps JSON-mode values and uses
aliases (``Relationship.from``).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IRModel(BaseModel):
    """Base for IR models: accepts field names or aliases on input."""

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# App / stack
# =============================================================================

class BackendStack(IRModel):
    language: str = ""      # python, go, nodejs, java, ...
    framework: str = ""     # fastapi, gin, express, spring, ...
    libraries: List[str] = Field(default_factory=list)
    runtime: str = ""       # docker, serverless


class FrontendStack(IRModel):
    language: str = ""      # typescript, javascript
    framework: str = ""     # react, vue, angular, svelte, next, nuxt
    libraries: List[str] = Field(default_factory=list)
    build: str = ""         # vite, webpack, next


class DatabaseStack(IRModel):
    type: str = ""
    version: str = ""
    features: List[str] = Field(default_factory=list)
    config: Dict[str, str] = Field(default_factory=dict)


class CacheStack(IRModel):
    type: str = ""
    version: str = ""
    config: Dict[str, str] = Field(default_factory=dict)


class TechStack(IRModel):
    backend: BackendStack = Field(default_factory=BackendStack)
    frontend: FrontendStack = Field(default_factory=FrontendStack)
    database: DatabaseStack = Field(default_factory=DatabaseStack)
    cache: CacheStack = Field(default_factory=CacheStack)


class Feature(IRModel):
    name: str
    description: str = ""
    type: str = ""          # auth, crud, payment, notification, search, file, overlay
    priority: str = "medium"
    dependencies: List[str] = Field(default_factory=list)
    entities: List[str] = Field(default_factory=list)
    operations: List[str] = Field(default_factory=list)


class ScaleMetric(IRModel):
    initial: int = 0
    peak: int = 0
    growth: int = 0  # percent per year


class ScaleRequirements(IRModel):
    users: ScaleMetric = Field(default_factory=ScaleMetric)
    requests: ScaleMetric = Field(default_factory=ScaleMetric)
    storage: ScaleMetric = Field(default_factory=ScaleMetric)  # GB
    latency: str = ""
    uptime: str = ""
    concurrency: int = 0


class AppSpec(IRModel):
    name: str = ""
    description: str = ""
    type: str = "web"
    domain: str = "general"
    stack: TechStack = Field(default_factory=TechStack)
    features: List[Feature] = Field(default_factory=list)
    scale: ScaleRequirements = Field(default_factory=ScaleRequirements)


# =============================================================================
# Non-functionals
# =============================================================================

class SecuritySpec(IRModel):
    authentication: List[str] = Field(default_factory=list)
    authorization: List[str] = Field(default_factory=list)
    encryption: List[str] = Field(default_factory=list)
    audit: bool = False
    compliance: List[str] = Field(default_factory=list)


class PerformanceSpec(IRModel):
    response_time: str = ""
    throughput: str = ""
    memory: str = ""
    cpu: str = ""


class ComplianceSpec(IRModel):
    standards: List[str] = Field(default_factory=list)
    data_retention: str = ""
    audit_log: bool = False


class AlertRule(IRModel):
    name: str
    condition: str
    action: str


class MonitoringSpec(IRModel):
    metrics: List[str] = Field(default_factory=list)
    logging: str = ""
    tracing: bool = False
    alerts: List[AlertRule] = Field(default_factory=list)


class NonFunctionalSpec(IRModel):
    security: SecuritySpec = Field(default_factory=SecuritySpec)
    performance: PerformanceSpec = Field(default_factory=PerformanceSpec)
    compliance: ComplianceSpec = Field(default_factory=ComplianceSpec)
    monitoring: MonitoringSpec = Field(default_factory=MonitoringSpec)


# =============================================================================
# API
# =============================================================================

class AuthSpec(IRModel):
    type: str = "bearer"
    scopes: List[str] = Field(default_factory=list)
    required: bool = True


class Parameter(IRModel):
    name: str
    in_: str = Field(default="path", alias="in")
    type: str = "string"
    required: bool = False
    description: str = ""


class RequestBody(IRModel):
    required: bool = True
    content_type: str = "application/json"
    schema_ref: str = Field(default="", alias="schema")


class Response(IRModel):
    description: str
    schema_ref: str = Field(default="", alias="schema")


class Endpoint(IRModel):
    path: str
    method: str
    summary: str = ""
    description: str = ""
    parameters: List[Parameter] = Field(default_factory=list)
    request_body: Optional[RequestBody] = None
    responses: Dict[str, Response] = Field(default_factory=dict)
    auth: bool = True


class APIConfig(IRModel):
    cors: bool = True
    compression: bool = True
    versioning: str = "path"
    pagination: str = "offset"


class APISpec(IRModel):
    type: str = "rest"
    version: str = "v1"
    base_url: str = "/api/v1"
    auth: AuthSpec = Field(default_factory=AuthSpec)
    endpoints: List[Endpoint] = Field(default_factory=list)
    schemas: List[Dict[str, Any]] = Field(default_factory=list)
    config: APIConfig = Field(default_factory=APIConfig)


# =============================================================================
# Data
# =============================================================================

class EntityField(IRModel):
    name: str
    type: str
    required: bool = False
    unique: bool = False
    default: Optional[str] = None
    description: str = ""


class Constraint(IRModel):
    type: str                   # primary_key, foreign_key, unique, check
    fields: List[str] = Field(default_factory=list)
    target: Optional[str] = None


class Entity(IRModel):
    """Detected domain noun. Frozen once compiled."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    description: str = ""
    fields: List[EntityField] = Field(default_factory=list)
    constraints: List[Constraint] = Field(default_factory=list)


class Relationship(IRModel):
    from_entity: str = Field(alias="from")
    to_entity: str = Field(alias="to")
    type: str = "one_to_many"
    foreign_key: str = ""


class DataConfig(IRModel):
    migrations: bool = True
    seeds: bool = True
    soft_delete: bool = False
    timestamps: bool = True


class DataSpec(IRModel):
    entities: List[Entity] = Field(default_factory=list)
    relationships: List[Relationship] = Field(default_factory=list)
    migrations: List[Dict[str, Any]] = Field(default_factory=list)
    seeds: List[Dict[str, Any]] = Field(default_factory=list)
    indexes: List[Dict[str, Any]] = Field(default_factory=list)
    config: DataConfig = Field(default_factory=DataConfig)


# =============================================================================
# UI / Ops / Acceptance
# =============================================================================

class Page(IRModel):
    name: str
    path: str
    title: str = ""
    auth: bool = False


class Theme(IRModel):
    primary: str = ""
    secondary: str = ""
    style: str = ""


class UIConfig(IRModel):
    responsive: bool = False
    pwa: bool = False
    i18n: bool = False


class UISpec(IRModel):
    type: str = ""  # spa, mpa; empty when the app has no UI
    pages: List[Page] = Field(default_factory=list)
    components: List[Dict[str, Any]] = Field(default_factory=list)
    theme: Theme = Field(default_factory=Theme)
    config: UIConfig = Field(default_factory=UIConfig)


class Environment(IRModel):
    name: str
    provider: str = ""
    region: str = ""


class CICDSpec(IRModel):
    provider: str = ""
    triggers: List[str] = Field(default_factory=list)
    stages: List[str] = Field(default_factory=list)


class OpsMonitoring(IRModel):
    provider: str = ""
    dashboards: List[str] = Field(default_factory=list)
    alerts: List[str] = Field(default_factory=list)


class BackupSpec(IRModel):
    frequency: str = ""
    retention: str = ""
    provider: str = ""


class ScalingSpec(IRModel):
    type: str = ""
    min: int = 0
    max: int = 0
    triggers: List[str] = Field(default_factory=list)


class OpsConfig(IRModel):
    ssl: bool = False
    cdn: bool = False
    load_balancer: bool = False


class OpsSpec(IRModel):
    environment: List[Environment] = Field(default_factory=list)
    ci_cd: CICDSpec = Field(default_factory=CICDSpec)
    monitoring: OpsMonitoring = Field(default_factory=OpsMonitoring)
    backup: BackupSpec = Field(default_factory=BackupSpec)
    scaling: ScalingSpec = Field(default_factory=ScalingSpec)
    config: OpsConfig = Field(default_factory=OpsConfig)


class AcceptanceCriteria(IRModel):
    id: str
    description: str
    type: str           # functional, performance, security
    priority: str       # must, should, could
    testable: bool = True
    automated: bool = True


class BlockingQuestion(IRModel):
    """Ambiguity prompt. ``required=False`` marks it non-blocking."""

    id: str
    question: str
    context: str = ""
    type: str = ""      # technical, business, security
    options: List[str] = Field(default_factory=list)
    required: bool = False


class SpecMetadata(IRModel):
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    version: str = "1.0"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    completeness: float = Field(default=0.0, ge=0.0, le=1.0)
    tags: List[str] = Field(default_factory=list)
    source: str = "ai"


class IRSpec(IRModel):
    version: str = "1.0"
    id: Optional[str] = None
    brief: str = ""
    app: AppSpec = Field(default_factory=AppSpec)
    non_functionals: NonFunctionalSpec = Field(default_factory=NonFunctionalSpec)
    api: APISpec = Field(default_factory=APISpec)
    data: DataSpec = Field(default_factory=DataSpec)
    ui: UISpec = Field(default_factory=UISpec)
    ops: OpsSpec = Field(default_factory=OpsSpec)
    acceptance: List[AcceptanceCriteria] = Field(default_factory=list)
    questions: List[BlockingQuestion] = Field(default_factory=list)
    metadata: SpecMetadata = Field(default_factory=SpecMetadata)


# =============================================================================
# Overlay detection / compilation result
# =============================================================================

class OverlaySuggestion(IRModel):
    name: str
    type: str           # domain | compliance
    confidence: float = Field(ge=0.0, le=1.0)
    reason: str = ""
    keywords: List[str] = Field(default_factory=list)


class OverlayDetectionResult(IRModel):
    suggestions: List[OverlaySuggestion] = Field(default_factory=list)
    auto_apply: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class CompilationResult(IRModel):
    spec: IRSpec
    questions: List[BlockingQuestion] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    confidence: float = 0.0
    overlay_detection: Optional[OverlayDetectionResult] = None
    suggested_overlays: List[str] = Field(default_factory=list)
    required_overlays: List[str] = Field(default_factory=list)


__all__ = [
    "IRModel",
    "BackendStack",
    "FrontendStack",
    "DatabaseStack",
    "CacheStack",
    "TechStack",
    "Feature",
    "ScaleMetric",
    "ScaleRequirements",
    "AppSpec",
    "SecuritySpec",
    "PerformanceSpec",
    "ComplianceSpec",
    "AlertRule",
    "MonitoringSpec",
    "NonFunctionalSpec",
    "AuthSpec",
    "Parameter",
    "RequestBody",
    "Response",
    "Endpoint",
    "APIConfig",
    "APISpec",
    "EntityField",
    "Constraint",
    "Entity",
    "Relationship",
    "DataConfig",
    "DataSpec",
    "Page",
    "Theme",
    "UIConfig",
    "UISpec",
    "Environment",
    "CICDSpec",
    "OpsMonitoring",
    "BackupSpec",
    "ScalingSpec",
    "OpsConfig",
    "OpsSpec",
    "AcceptanceCriteria",
    "BlockingQuestion",
    "SpecMetadata",
    "IRSpec",
    "OverlaySuggestion",
    "OverlayDetectionResult",
    "CompilationResult",
]
