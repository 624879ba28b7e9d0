# FILE: factory/ir/patterns.py
"""
Rule tables for brief classification.

Every table is an ORDERED tuple of rules; the first matching rule wins where a
single value is chosen (app type, domain, backend language ...). Tables are
bundled into a RuleSet that is passed into the compiler, so tests can swap in
smaller tables and several configurations can coexist in one process.

Patterns are matched against the normalized (lower-cased) brief.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Pattern, Sequence, Tuple


# =============================================================================
# Rule primitives
# =============================================================================

@dataclass(frozen=True)
class Rule:
    """One (predicate, value, weight) entry of a rule table."""
    pattern: Pattern[str]
    value: str
    weight: float = 1.0

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def rule(pattern: str, value: str, weight: float = 1.0) -> Rule:
    return Rule(re.compile(pattern), value, weight)


def first_match(rules: Iterable[Rule], text: str, default: Optional[str] = None) -> Optional[str]:
    """Value of the first rule matching text, else default."""
    for r in rules:
        if r.matches(text):
            return r.value
    return default


def all_matches(rules: Iterable[Rule], text: str) -> List[str]:
    """Values of every matching rule, in table order, without duplicates."""
    out: List[str] = []
    for r in rules:
        if r.matches(text) and r.value not in out:
            out.append(r.value)
    return out


def contains(pattern: str, text: str) -> bool:
    return re.search(pattern, text) is not None


# =============================================================================
# Templates
# =============================================================================

@dataclass(frozen=True)
class FeatureTemplate:
    pattern: Pattern[str]
    name: str
    description: str
    type: str
    priority: str
    operations: Tuple[str, ...]


@dataclass(frozen=True)
class FieldTemplate:
    name: str
    type: str
    required: bool = False
    unique: bool = False
    default: Optional[str] = None


@dataclass(frozen=True)
class EntityTemplate:
    pattern: Pattern[str]
    name: str
    fields: Tuple[FieldTemplate, ...]


@dataclass(frozen=True)
class RelationshipRule:
    from_entity: str
    to_entity: str
    type: str
    foreign_key: str


def _timestamps() -> Tuple[FieldTemplate, ...]:
    return (
        FieldTemplate("created_at", "timestamp", required=True),
        FieldTemplate("updated_at", "timestamp", required=True),
    )


# =============================================================================
# App classification
# =============================================================================

# Explicit markers first, broad nouns (website, dashboard) last.
APP_TYPE_RULES: Tuple[Rule, ...] = (
    rule(r"\b(?:rest\s+)?api\b", "api"),
    rule(r"\bmicroservice", "api"),
    rule(r"\bweb\s+(?:app|application)\b", "web"),
    rule(r"\bspa\b|single\s+page\s+application", "web"),
    rule(r"\bmobile\s+app", "mobile"),
    rule(r"\bcli\b|command\s+line", "cli"),
    rule(r"\bdesktop\s+app", "desktop"),
    rule(r"\bwebsite\b", "web"),
    rule(r"\bdashboard\b", "web"),
)

APP_TYPE_SECONDARY_RULES: Tuple[Rule, ...] = (
    rule(r"\b(?:endpoint|route|controller)\b", "api"),
    rule(r"\b(?:page|component|ui|interface)\b", "web"),
)

DEFAULT_APP_TYPE = "web"

DOMAIN_RULES: Tuple[Rule, ...] = (
    rule(r"\b(?:ecommerce|e-commerce|shop|store|cart|product|order)\b", "ecommerce"),
    rule(r"\b(?:fintech|banking|payment|invoice|billing|finance)\b", "fintech"),
    rule(r"\b(?:healthcare|medical|patient|doctor|hospital)\b", "healthcare"),
    rule(r"\b(?:education|learning|course|student|teacher)\b", "education"),
    rule(r"\b(?:social|media|post|comment|follow|friend)\b", "social"),
    rule(r"\b(?:blog|news|article|content|cms)\b", "content"),
    rule(r"\b(?:saas|crm|erp|hr|human\s+resource)\b", "business"),
    rule(r"\b(?:iot|sensor|device|monitoring)\b", "iot"),
    rule(r"\b(?:game|gaming|player|score)\b", "gaming"),
    rule(r"\b(?:real\s+estate|property|listing)\b", "realestate"),
    rule(r"\b(?:travel|booking|hotel|flight|reservation)\b", "travel"),
    rule(r"\b(?:food|restaurant|menu|delivery)\b", "food"),
)

DEFAULT_DOMAIN = "general"

APP_NAME_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"""(?:app|application|system|service|platform)\s+(?:called|named)\s+["']?([^"'\s]+)["']?"""),
    re.compile(r"""["']([^"']+)["']\s+(?:app|application|system)"""),
    # articles are never captured as the name
    re.compile(r"""create\s+(?:(?:a|an)\s+)?(?!(?:a|an)\s)["']?([^"'\s]+)["']?\s+(?:app|application|system)"""),
)

PLACEHOLDER_APP_NAME = "Generated Application"


# =============================================================================
# Tech stack
# =============================================================================

BACKEND_LANGUAGE_RULES: Tuple[Rule, ...] = (
    rule(r"\b(?:python|py|fastapi|django|flask)\b", "python"),
    rule(r"\b(?:golang|go|gin|echo|fiber)\b", "go"),
    rule(r"\b(?:node|nodejs|express|nest|koa)\b", "nodejs"),
    rule(r"\b(?:java|spring|springboot)\b", "java"),
    rule(r"\b(?:ruby|rails|sinatra)\b", "ruby"),
    rule(r"\b(?:php|laravel|symfony)\b", "php"),
    rule(r"\b(?:rust|actix|warp)\b", "rust"),
    rule(r"\b(?:dotnet|csharp|asp\.net)\b|\bc#", "csharp"),
)

BACKEND_FRAMEWORK_RULES: Dict[str, Tuple[Rule, ...]] = {
    "python": (
        rule(r"\bfastapi\b", "fastapi"),
        rule(r"\bdjango\b", "django"),
        rule(r"\bflask\b", "flask"),
    ),
    "go": (
        rule(r"\bgin\b", "gin"),
        rule(r"\becho\b", "echo"),
        rule(r"\bfiber\b", "fiber"),
    ),
    "nodejs": (
        rule(r"\bexpress\b", "express"),
        rule(r"\bnest\b", "nestjs"),
        rule(r"\bkoa\b", "koa"),
    ),
    "java": (
        rule(r"\bspringboot\b", "springboot"),
        rule(r"\bspring\b", "spring"),
    ),
}

BACKEND_LIBRARY_RULES: Dict[str, Tuple[Rule, ...]] = {
    "python": (
        rule(r"\bpydantic\b", "pydantic"),
        rule(r"\bsqlalchemy\b", "sqlalchemy"),
        rule(r"\balembic\b", "alembic"),
        rule(r"\bcelery\b", "celery"),
    ),
    "go": (
        rule(r"\bgorm\b", "gorm"),
        rule(r"\bmux\b", "gorilla/mux"),
        rule(r"\bviper\b", "viper"),
    ),
    "nodejs": (
        rule(r"\bmongoose\b", "mongoose"),
        rule(r"\bsequelize\b", "sequelize"),
        rule(r"\bpassport\b", "passport"),
    ),
}

FRONTEND_LANGUAGE_RULES: Tuple[Rule, ...] = (
    rule(r"\b(?:typescript|ts)\b", "typescript"),
    rule(r"\b(?:javascript|js)\b", "javascript"),
)

FRONTEND_FRAMEWORK_RULES: Tuple[Rule, ...] = (
    rule(r"\b(?:react|reactjs)\b", "react"),
    rule(r"\b(?:vue|vuejs)\b", "vue"),
    rule(r"\bangular\b", "angular"),
    rule(r"\bsvelte\b", "svelte"),
    rule(r"\b(?:next|nextjs)\b", "next"),
    rule(r"\bnuxt\b", "nuxt"),
)

DEFAULT_FRONTEND_LANGUAGE = "typescript"
DEFAULT_FRONTEND_FRAMEWORK = "react"

DATABASE_RULES: Tuple[Rule, ...] = (
    rule(r"\b(?:postgresql|postgres)\b", "postgresql"),
    rule(r"\bmysql\b", "mysql"),
    rule(r"\b(?:mongodb|mongo)\b", "mongodb"),
    rule(r"\bsqlite\b", "sqlite"),
    rule(r"\bcassandra\b", "cassandra"),
)

DATABASE_VERSIONS: Dict[str, str] = {
    "postgresql": "15",
    "mysql": "8.0",
    "mongodb": "6.0",
}

CACHE_PATTERN = r"\b(?:cache|caching|redis|memcache)\b"


# =============================================================================
# Features / entities
# =============================================================================

def _feature(pattern: str, name: str, description: str, type_: str,
             priority: str, operations: Sequence[str]) -> FeatureTemplate:
    return FeatureTemplate(re.compile(pattern), name, description, type_, priority, tuple(operations))


FEATURE_TEMPLATES: Tuple[FeatureTemplate, ...] = (
    _feature(r"\b(?:user|auth|login|signup|register)\b", "User Authentication",
             "User registration, login, and authentication", "auth", "high",
             ["register", "login", "logout", "verify"]),
    _feature(r"\b(?:crud|create|read|update|delete)\b", "CRUD Operations",
             "Create, read, update, and delete operations", "crud", "high",
             ["create", "read", "update", "delete"]),
    _feature(r"\b(?:payment|billing|invoice|checkout)\b", "Payment Processing",
             "Handle payments and billing", "payment", "high",
             ["charge", "refund", "webhook"]),
    _feature(r"\b(?:notification|email|sms|alert)\b", "Notifications",
             "Send notifications to users", "notification", "medium",
             ["send", "template", "schedule"]),
    _feature(r"\b(?:search|filter|query)\b", "Search & Filter",
             "Search and filter functionality", "search", "medium",
             ["search", "filter", "sort"]),
    _feature(r"\b(?:upload|file|document|image)\b", "File Upload",
             "File upload and management", "file", "medium",
             ["upload", "download", "delete"]),
)

_ID = FieldTemplate("id", "uuid", required=True, unique=True)

ENTITY_TEMPLATES: Tuple[EntityTemplate, ...] = (
    EntityTemplate(re.compile(r"\busers?\b", re.IGNORECASE), "User", (
        _ID,
        FieldTemplate("email", "string", required=True, unique=True),
        FieldTemplate("name", "string", required=True),
        FieldTemplate("password_hash", "string", required=True),
    ) + _timestamps()),
    EntityTemplate(re.compile(r"\bproducts?\b", re.IGNORECASE), "Product", (
        _ID,
        FieldTemplate("name", "string", required=True),
        FieldTemplate("description", "text"),
        FieldTemplate("price", "decimal", required=True),
    ) + _timestamps()),
    EntityTemplate(re.compile(r"\b(?:orders?|carts?|purchases?)\b", re.IGNORECASE), "Order", (
        _ID,
        FieldTemplate("user_id", "uuid", required=True),
        FieldTemplate("total", "decimal", required=True),
        FieldTemplate("status", "string", required=True, default="pending"),
    ) + _timestamps()),
    EntityTemplate(re.compile(r"\binvoices?\b", re.IGNORECASE), "Invoice", (
        _ID,
        FieldTemplate("number", "string", required=True, unique=True),
        FieldTemplate("customer_id", "uuid", required=True),
        FieldTemplate("amount", "decimal", required=True),
        FieldTemplate("status", "string", required=True, default="draft"),
        FieldTemplate("due_date", "date", required=True),
    ) + _timestamps()),
)

RELATIONSHIP_RULES: Tuple[RelationshipRule, ...] = (
    RelationshipRule("User", "Order", "one_to_many", "user_id"),
    RelationshipRule("User", "Invoice", "one_to_many", "customer_id"),
)

TAG_RULES: Tuple[Rule, ...] = (
    rule(r"\bapi\b", "api"),
    rule(r"\bweb\b", "web"),
    rule(r"\bcrud\b", "crud"),
    rule(r"\bauth\b", "auth"),
)


# =============================================================================
# Overlay detection tables
# =============================================================================

DOMAIN_OVERLAY_PATTERNS: Tuple[Tuple[str, str], ...] = (
    ("fintech", r"\b(payment|banking|financial|fintech|transaction|credit|debit|card|wallet|investment|trading|loan|mortgage|insurance|crypto|blockchain|bitcoin)\b"),
    ("healthcare", r"\b(healthcare|medical|patient|hospital|clinic|doctor|physician|nurse|health|treatment|diagnosis|prescription|therapy|hipaa|phi|ehr|emr)\b"),
    ("ecommerce", r"\b(ecommerce|e-commerce|shop|store|product|inventory|cart|checkout|order|customer|retail|marketplace|catalog|purchase|sale)\b"),
)

COMPLIANCE_OVERLAY_PATTERNS: Tuple[Tuple[str, str], ...] = (
    ("pci", r"\b(pci|pci-dss|card data|payment card|cardholder|card security|payment security)\b"),
    ("hipaa", r"\b(hipaa|phi|protected health|health information|medical privacy|patient privacy)\b"),
    ("gdpr", r"\b(gdpr|data protection|privacy|personal data|consent|data subject|right to be forgotten|data portability)\b"),
)

# Substrings that add +0.2 to a domain's confidence.
DOMAIN_SECONDARY_SIGNALS: Dict[str, Tuple[str, ...]] = {
    "fintech": ("bank", "financial"),
    "healthcare": ("patient", "medical"),
    "ecommerce": ("shop", "product"),
}

DOMAIN_REASONS: Dict[str, str] = {
    "fintech": "Detected financial services keywords: {keywords}",
    "healthcare": "Detected healthcare-related keywords: {keywords}",
    "ecommerce": "Detected e-commerce keywords: {keywords}",
}

COMPLIANCE_REASONS: Dict[str, str] = {
    "pci": "Detected PCI DSS compliance requirements: {keywords}",
    "hipaa": "Detected HIPAA compliance requirements: {keywords}",
    "gdpr": "Detected GDPR compliance requirements: {keywords}",
}


# =============================================================================
# RuleSet
# =============================================================================

@dataclass(frozen=True)
class RuleSet:
    """Injectable bundle of every table the extractors read."""
    app_types: Tuple[Rule, ...] = APP_TYPE_RULES
    app_type_secondary: Tuple[Rule, ...] = APP_TYPE_SECONDARY_RULES
    domains: Tuple[Rule, ...] = DOMAIN_RULES
    app_names: Tuple[Pattern[str], ...] = APP_NAME_PATTERNS
    backend_languages: Tuple[Rule, ...] = BACKEND_LANGUAGE_RULES
    backend_frameworks: Mapping[str, Tuple[Rule, ...]] = field(
        default_factory=lambda: dict(BACKEND_FRAMEWORK_RULES)
    )
    backend_libraries: Mapping[str, Tuple[Rule, ...]] = field(
        default_factory=lambda: dict(BACKEND_LIBRARY_RULES)
    )
    frontend_languages: Tuple[Rule, ...] = FRONTEND_LANGUAGE_RULES
    frontend_frameworks: Tuple[Rule, ...] = FRONTEND_FRAMEWORK_RULES
    databases: Tuple[Rule, ...] = DATABASE_RULES
    database_versions: Mapping[str, str] = field(default_factory=lambda: dict(DATABASE_VERSIONS))
    features: Tuple[FeatureTemplate, ...] = FEATURE_TEMPLATES
    entities: Tuple[EntityTemplate, ...] = ENTITY_TEMPLATES
    relationships: Tuple[RelationshipRule, ...] = RELATIONSHIP_RULES
    tags: Tuple[Rule, ...] = TAG_RULES


def default_rule_set() -> RuleSet:
    return RuleSet()


__all__ = [
    "Rule",
    "rule",
    "first_match",
    "all_matches",
    "contains",
    "FeatureTemplate",
    "FieldTemplate",
    "EntityTemplate",
    "RelationshipRule",
    "RuleSet",
    "default_rule_set",
    "DEFAULT_APP_TYPE",
    "DEFAULT_DOMAIN",
    "DEFAULT_FRONTEND_LANGUAGE",
    "DEFAULT_FRONTEND_FRAMEWORK",
    "PLACEHOLDER_APP_NAME",
    "CACHE_PATTERN",
    "DOMAIN_OVERLAY_PATTERNS",
    "COMPLIANCE_OVERLAY_PATTERNS",
    "DOMAIN_SECONDARY_SIGNALS",
    "DOMAIN_REASONS",
    "COMPLIANCE_REASONS",
]
