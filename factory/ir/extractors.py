# FILE: factory/ir/extractors.py
"""
Per-section IR extractors.

Pure functions over the NORMALIZED brief (see normalize_brief). Each takes the
RuleSet it reads from and, where a fallback is needed, the CompilerDefaults.
No function here keeps state between calls.
"""

from __future__ import annotations

import re
from typing import List, Optional

from config.defaults import CompilerDefaults
from factory.ir.patterns import (
    CACHE_PATTERN,
    DEFAULT_APP_TYPE,
    DEFAULT_DOMAIN,
    DEFAULT_FRONTEND_FRAMEWORK,
    DEFAULT_FRONTEND_LANGUAGE,
    PLACEHOLDER_APP_NAME,
    RuleSet,
    all_matches,
    contains,
    first_match,
)
from factory.ir.schema import (
    AcceptanceCriteria,
    APIConfig,
    APISpec,
    AppSpec,
    AuthSpec,
    BackendStack,
    BackupSpec,
    CacheStack,
    CICDSpec,
    ComplianceSpec,
    Constraint,
    DataConfig,
    DatabaseStack,
    DataSpec,
    Endpoint,
    Entity,
    EntityField,
    Environment,
    Feature,
    FrontendStack,
    MonitoringSpec,
    NonFunctionalSpec,
    OpsConfig,
    OpsMonitoring,
    OpsSpec,
    Page,
    Parameter,
    PerformanceSpec,
    Relationship,
    RequestBody,
    Response,
    ScaleMetric,
    ScaleRequirements,
    ScalingSpec,
    SecuritySpec,
    TechStack,
    Theme,
    UIConfig,
    UISpec,
)

_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_RE = re.compile(r"[.!?]+")

MAX_DESCRIPTION_LENGTH = 200


def normalize_brief(brief: str) -> str:
    """Lower-case, collapse whitespace runs, trim."""
    return _WHITESPACE_RE.sub(" ", brief.lower()).strip()


# =============================================================================
# App
# =============================================================================

def extract_app_type(brief: str, rules: RuleSet) -> str:
    explicit = first_match(rules.app_types, brief)
    if explicit:
        return explicit
    return first_match(rules.app_type_secondary, brief, DEFAULT_APP_TYPE)


def extract_domain(brief: str, rules: RuleSet) -> str:
    return first_match(rules.domains, brief, DEFAULT_DOMAIN)


def extract_app_name(brief: str, rules: RuleSet, domain: str, app_type: str) -> str:
    for pattern in rules.app_names:
        m = pattern.search(brief)
        if m and m.group(1):
            return m.group(1).replace("_", " ").title()

    if domain and app_type:
        return f"{domain.title()} {app_type.title()}"
    return PLACEHOLDER_APP_NAME


def extract_description(brief: str) -> str:
    """First sentence, capped at 200 characters."""
    first = _SENTENCE_RE.split(brief, maxsplit=1)[0].strip()
    if not first:
        return brief
    if len(first) > MAX_DESCRIPTION_LENGTH:
        first = first[:MAX_DESCRIPTION_LENGTH] + "..."
    return first


def extract_features(brief: str, rules: RuleSet) -> List[Feature]:
    features: List[Feature] = []
    seen = set()
    for tpl in rules.features:
        if tpl.name in seen or not tpl.pattern.search(brief):
            continue
        seen.add(tpl.name)
        features.append(Feature(
            name=tpl.name,
            description=tpl.description,
            type=tpl.type,
            priority=tpl.priority,
            operations=list(tpl.operations),
        ))
    return features


def extract_scale(brief: str) -> ScaleRequirements:
    scale = ScaleRequirements(
        users=ScaleMetric(initial=100, peak=1000, growth=50),
        requests=ScaleMetric(initial=1000, peak=10000, growth=100),
        storage=ScaleMetric(initial=1, peak=100, growth=200),
        latency="500ms",
        uptime="99.9%",
        concurrency=100,
    )

    if contains(r"\b(?:high\s+scale|enterprise|millions?\s+of\s+users|millions?\s+users)\b", brief):
        scale.users.peak = 1_000_000
        scale.requests.peak = 100_000
        scale.uptime = "99.99%"
        scale.latency = "100ms"
    elif contains(r"\b(?:startup|small|prototype)\b", brief):
        scale.users.peak = 100
        scale.requests.peak = 1000

    return scale


def extract_app(brief: str, rules: RuleSet, defaults: CompilerDefaults) -> AppSpec:
    app_type = extract_app_type(brief, rules)
    domain = extract_domain(brief, rules)
    return AppSpec(
        name=extract_app_name(brief, rules, domain, app_type),
        description=extract_description(brief),
        type=app_type,
        domain=domain,
        stack=extract_tech_stack(brief, rules, defaults, app_type),
        features=extract_features(brief, rules),
        scale=extract_scale(brief),
    )


# =============================================================================
# Tech stack
# =============================================================================

def extract_backend(brief: str, rules: RuleSet, defaults: CompilerDefaults) -> BackendStack:
    language = first_match(rules.backend_languages, brief, defaults.backend_language)

    # The default framework only belongs to the default language.
    fallback = defaults.backend_framework if language == defaults.backend_language else ""
    framework = first_match(rules.backend_frameworks.get(language, ()), brief, fallback)

    return BackendStack(
        language=language,
        framework=framework,
        libraries=all_matches(rules.backend_libraries.get(language, ()), brief),
        runtime="serverless" if contains(r"\b(?:serverless|lambda)\b", brief) else "docker",
    )


def extract_frontend(brief: str, rules: RuleSet, app_type: str) -> FrontendStack:
    if app_type != "web":
        return FrontendStack()

    language = first_match(rules.frontend_languages, brief, DEFAULT_FRONTEND_LANGUAGE)
    framework = first_match(rules.frontend_frameworks, brief, DEFAULT_FRONTEND_FRAMEWORK)

    libraries: List[str] = []
    if framework == "react":
        libraries = ["@tanstack/react-query", "react-router-dom"]
        if contains(r"\b(?:ui|design)\b", brief):
            libraries.append("@mui/material")

    if framework == "next":
        build = "next"
    elif contains(r"\bwebpack\b", brief) and not contains(r"\bvite\b", brief):
        build = "webpack"
    else:
        build = "vite"

    return FrontendStack(language=language, framework=framework, libraries=libraries, build=build)


def extract_database(brief: str, rules: RuleSet, defaults: CompilerDefaults) -> DatabaseStack:
    db_type = first_match(rules.databases, brief, defaults.database)
    return DatabaseStack(
        type=db_type,
        version=rules.database_versions.get(db_type, "latest"),
        features=["migrations", "indexes"],
    )


def extract_cache(brief: str) -> CacheStack:
    if contains(CACHE_PATTERN, brief):
        return CacheStack(type="redis", version="7")
    return CacheStack()


def extract_tech_stack(
    brief: str,
    rules: RuleSet,
    defaults: CompilerDefaults,
    app_type: Optional[str] = None,
) -> TechStack:
    if app_type is None:
        app_type = extract_app_type(brief, rules)
    return TechStack(
        backend=extract_backend(brief, rules, defaults),
        frontend=extract_frontend(brief, rules, app_type),
        database=extract_database(brief, rules, defaults),
        cache=extract_cache(brief),
    )


# =============================================================================
# Non-functionals
# =============================================================================

def _detected_compliance(brief: str) -> List[str]:
    found = []
    if contains(r"\bgdpr\b", brief):
        found.append("gdpr")
    if contains(r"\bhipaa\b", brief):
        found.append("hipaa")
    if contains(r"\bpci\b", brief):
        found.append("pci")
    return found


def extract_security(brief: str) -> SecuritySpec:
    authentication = ["jwt"]
    if contains(r"\boauth2?\b", brief):
        authentication.append("oauth2")
    if contains(r"\bbasic\s+auth\b", brief):
        authentication.append("basic")

    authorization = ["rbac"]
    if contains(r"\bacl\b|access\s+control\s+list\b", brief):
        authorization.append("acl")

    encryption = ["tls", "bcrypt"]
    if contains(r"\baes\b", brief):
        encryption.append("aes256")

    compliance = _detected_compliance(brief)

    return SecuritySpec(
        authentication=authentication,
        authorization=authorization,
        encryption=encryption,
        audit=contains(r"\baudit\b", brief) or bool(compliance),
        compliance=compliance,
    )


def extract_performance(brief: str) -> PerformanceSpec:
    fast = contains(r"\b(?:fast|quick|real.?time)\b", brief)
    return PerformanceSpec(
        response_time="100ms" if fast else "500ms",
        throughput="1000rps",
        memory="512MB",
        cpu="2cores",
    )


def extract_compliance(brief: str) -> ComplianceSpec:
    standards: List[str] = []
    retention = "7years"
    if contains(r"\bgdpr\b", brief):
        standards.append("gdpr")
        retention = "2years"
    if contains(r"\bhipaa\b", brief):
        standards.append("hipaa")
        retention = "7years"
    if contains(r"\bpci\b", brief):
        standards.append("pci-dss")
    return ComplianceSpec(standards=standards, data_retention=retention, audit_log=bool(standards))


def extract_monitoring(brief: str) -> MonitoringSpec:
    return MonitoringSpec(
        metrics=["cpu", "memory", "requests", "errors"],
        logging="structured",
        tracing=contains(r"\b(?:tracing|trace)\b", brief),
    )


def extract_non_functionals(brief: str) -> NonFunctionalSpec:
    return NonFunctionalSpec(
        security=extract_security(brief),
        performance=extract_performance(brief),
        compliance=extract_compliance(brief),
        monitoring=extract_monitoring(brief),
    )


# =============================================================================
# Data
# =============================================================================

def extract_entities(brief: str, rules: RuleSet) -> List[Entity]:
    entities: List[Entity] = []
    seen = set()
    for tpl in rules.entities:
        if tpl.name in seen or not tpl.pattern.search(brief):
            continue
        seen.add(tpl.name)
        entities.append(Entity(
            name=tpl.name,
            description=f"{tpl.name} entity",
            fields=[
                EntityField(
                    name=f.name,
                    type=f.type,
                    required=f.required,
                    unique=f.unique,
                    default=f.default,
                )
                for f in tpl.fields
            ],
            constraints=[Constraint(type="primary_key", fields=["id"])],
        ))
    return entities


def extract_relationships(entities: List[Entity], rules: RuleSet) -> List[Relationship]:
    names = {e.name for e in entities}
    return [
        Relationship(
            from_entity=r.from_entity,
            to_entity=r.to_entity,
            type=r.type,
            foreign_key=r.foreign_key,
        )
        for r in rules.relationships
        if r.from_entity in names and r.to_entity in names
    ]


def extract_data(entities: List[Entity], rules: RuleSet) -> DataSpec:
    return DataSpec(
        entities=entities,
        relationships=extract_relationships(entities, rules),
        config=DataConfig(migrations=True, seeds=True, soft_delete=False, timestamps=True),
    )


# =============================================================================
# API
# =============================================================================

def _id_param() -> List[Parameter]:
    return [Parameter(name="id", in_="path", type="string", required=True)]


def _json_body(schema: str) -> RequestBody:
    return RequestBody(required=True, content_type="application/json", schema_ref=schema)


def build_endpoints(entities: List[Entity]) -> List[Endpoint]:
    """Exactly five CRUD endpoints per entity, in list/get/create/update/delete order."""
    endpoints: List[Endpoint] = []
    for entity in entities:
        name = entity.name
        path = f"/{name.lower()}"
        item = f"{path}/{{id}}"

        endpoints.extend([
            Endpoint(
                path=path,
                method="GET",
                summary=f"List {name}",
                description=f"Retrieve a list of {name}",
                responses={"200": Response(description="Success", schema_ref=f"{name}List")},
            ),
            Endpoint(
                path=item,
                method="GET",
                summary=f"Get {name}",
                description=f"Retrieve a specific {name} by ID",
                parameters=_id_param(),
                responses={
                    "200": Response(description="Success", schema_ref=name),
                    "404": Response(description="Not found"),
                },
            ),
            Endpoint(
                path=path,
                method="POST",
                summary=f"Create {name}",
                description=f"Create a new {name}",
                request_body=_json_body(f"Create{name}"),
                responses={
                    "201": Response(description="Created", schema_ref=name),
                    "400": Response(description="Bad request"),
                },
            ),
            Endpoint(
                path=item,
                method="PUT",
                summary=f"Update {name}",
                description=f"Update an existing {name}",
                parameters=_id_param(),
                request_body=_json_body(f"Update{name}"),
                responses={
                    "200": Response(description="Updated", schema_ref=name),
                    "404": Response(description="Not found"),
                },
            ),
            Endpoint(
                path=item,
                method="DELETE",
                summary=f"Delete {name}",
                description=f"Delete a {name}",
                parameters=_id_param(),
                responses={
                    "204": Response(description="Deleted"),
                    "404": Response(description="Not found"),
                },
            ),
        ])
    return endpoints


def extract_api(brief: str, entities: List[Entity]) -> APISpec:
    if contains(r"\bgraphql\b", brief):
        api_type = "graphql"
    elif contains(r"\bgrpc\b", brief):
        api_type = "grpc"
    else:
        api_type = "rest"

    return APISpec(
        type=api_type,
        version="v1",
        base_url="/api/v1",
        auth=AuthSpec(type="bearer", required=True),
        endpoints=build_endpoints(entities),
        config=APIConfig(cors=True, compression=True, versioning="path", pagination="offset"),
    )


# =============================================================================
# UI / Ops / Acceptance / Tags
# =============================================================================

def extract_ui(app_type: str, entities: List[Entity]) -> UISpec:
    if app_type != "web":
        return UISpec()

    pages = [
        Page(name="Home", path="/", title="Home", auth=False),
        Page(name="Login", path="/login", title="Login", auth=False),
    ]
    for entity in entities:
        pages.append(Page(
            name=f"{entity.name} List",
            path=f"/{entity.name.lower()}",
            title=f"{entity.name} Management",
            auth=True,
        ))

    return UISpec(
        type="spa",
        pages=pages,
        theme=Theme(primary="#007bff", secondary="#6c757d", style="bootstrap"),
        config=UIConfig(responsive=True, pwa=False, i18n=False),
    )


def extract_ops() -> OpsSpec:
    return OpsSpec(
        environment=[
            Environment(name="development", provider="docker", region="local"),
            Environment(name="staging", provider="k8s", region="us-east-1"),
            Environment(name="production", provider="k8s", region="us-east-1"),
        ],
        ci_cd=CICDSpec(provider="github", triggers=["push", "pr"], stages=["test", "build", "deploy"]),
        monitoring=OpsMonitoring(
            provider="prometheus",
            dashboards=["overview", "performance", "errors"],
            alerts=["high_error_rate", "high_latency"],
        ),
        backup=BackupSpec(frequency="daily", retention="30d", provider="s3"),
        scaling=ScalingSpec(type="horizontal", min=2, max=10, triggers=["cpu", "memory"]),
        config=OpsConfig(ssl=True, cdn=True, load_balancer=True),
    )


def extract_acceptance() -> List[AcceptanceCriteria]:
    # Baseline only; brief-specific criteria are not derived yet.
    return [
        AcceptanceCriteria(
            id="functional-001",
            description="All API endpoints return proper HTTP status codes",
            type="functional",
            priority="must",
        ),
        AcceptanceCriteria(
            id="security-001",
            description="All endpoints require proper authentication",
            type="security",
            priority="must",
        ),
        AcceptanceCriteria(
            id="performance-001",
            description="API response time is under 500ms for 95% of requests",
            type="performance",
            priority="should",
        ),
    ]


def extract_tags(brief: str, rules: RuleSet) -> List[str]:
    return all_matches(rules.tags, brief)


__all__ = [
    "normalize_brief",
    "extract_app",
    "extract_app_type",
    "extract_domain",
    "extract_app_name",
    "extract_description",
    "extract_features",
    "extract_scale",
    "extract_tech_stack",
    "extract_backend",
    "extract_frontend",
    "extract_database",
    "extract_cache",
    "extract_non_functionals",
    "extract_security",
    "extract_performance",
    "extract_compliance",
    "extract_monitoring",
    "extract_entities",
    "extract_relationships",
    "extract_data",
    "build_endpoints",
    "extract_api",
    "extract_ui",
    "extract_ops",
    "extract_acceptance",
    "extract_tags",
]
