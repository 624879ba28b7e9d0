# FILE: tests/test_extractors.py
"""Tests for factory/ir/extractors.py and the rule tables they read."""

import pytest

from config.defaults import CompilerDefaults
from factory.ir import extractors
from factory.ir.patterns import all_matches, default_rule_set, first_match, rule

RULES = default_rule_set()
DEFAULTS = CompilerDefaults()


class TestRulePrimitives:
    def test_first_match_respects_order(self):
        rules = (rule(r"\bfoo\b", "first"), rule(r"\bfoo\b", "second"))
        assert first_match(rules, "foo") == "first"

    def test_first_match_default(self):
        assert first_match((rule(r"x", "x"),), "abc", "fallback") == "fallback"

    def test_all_matches_dedupes(self):
        rules = (rule(r"a", "v"), rule(r"b", "v"), rule(r"c", "w"))
        assert all_matches(rules, "abc") == ["v", "w"]


class TestNormalize:
    def test_lowercase_and_collapse(self):
        assert extractors.normalize_brief("  Build\tA   WEB\napp ") == "build a web app"


class TestAppType:
    @pytest.mark.parametrize("brief,expected", [
        ("a rest api for todos", "api"),
        ("order microservices", "api"),
        ("a web application for notes", "web"),
        ("a single page application", "web"),
        ("a mobile app for runners", "mobile"),
        ("a cli to rename files", "cli"),
        ("a desktop app for photos", "desktop"),
        ("a dashboard for sales", "web"),
        ("expose an endpoint for uploads", "api"),
        ("a settings page", "web"),
        ("something vague", "web"),
    ])
    def test_precedence(self, brief, expected):
        assert extractors.extract_app_type(brief, RULES) == expected

    def test_explicit_beats_secondary(self):
        # "page" is a web signal, "api" is explicit
        assert extractors.extract_app_type("an api with a docs page", RULES) == "api"


class TestDomain:
    @pytest.mark.parametrize("brief,expected", [
        ("an online shop", "ecommerce"),
        ("a banking portal", "fintech"),
        ("a hospital roster", "healthcare"),
        ("a course catalogue", "education"),
        ("a cms for articles", "content"),
        ("a crm for sales", "business"),
        ("a sensor network", "iot"),
        ("a hotel booking site", "travel"),
        ("a restaurant menu", "food"),
        ("a todo list", "general"),
    ])
    def test_first_match_wins(self, brief, expected):
        assert extractors.extract_domain(brief, RULES) == expected

    def test_table_order(self):
        # "product" (ecommerce) precedes "payment" (fintech) in the table
        assert extractors.extract_domain("product payment flow", RULES) == "ecommerce"


class TestDescription:
    def test_first_sentence(self):
        assert extractors.extract_description("build a shop. it sells hats!") == "build a shop"

    def test_truncated(self):
        desc = extractors.extract_description("x" * 250)
        assert desc == "x" * 200 + "..."


class TestScale:
    def test_baseline(self):
        scale = extractors.extract_scale("a todo list")
        assert scale.users.peak == 1000
        assert scale.latency == "500ms"
        assert scale.uptime == "99.9%"

    def test_enterprise(self):
        scale = extractors.extract_scale("enterprise grade payroll")
        assert scale.users.peak == 1_000_000
        assert scale.requests.peak == 100_000
        assert scale.uptime == "99.99%"
        assert scale.latency == "100ms"

    def test_startup(self):
        scale = extractors.extract_scale("a startup prototype")
        assert scale.users.peak == 100
        assert scale.requests.peak == 1000


class TestTechStack:
    def test_go_with_gin(self):
        backend = extractors.extract_backend("a golang service using gin and gorm", RULES, DEFAULTS)
        assert backend.language == "go"
        assert backend.framework == "gin"
        assert backend.libraries == ["gorm"]

    def test_non_default_language_has_no_default_framework(self):
        backend = extractors.extract_backend("a ruby service", RULES, DEFAULTS)
        assert backend.language == "ruby"
        assert backend.framework == ""

    def test_serverless_runtime(self):
        assert extractors.extract_backend("a lambda function", RULES, DEFAULTS).runtime == "serverless"
        assert extractors.extract_backend("a service", RULES, DEFAULTS).runtime == "docker"

    def test_frontend_only_for_web(self):
        assert extractors.extract_frontend("vue", RULES, "api").framework == ""
        fe = extractors.extract_frontend("a vue app in javascript", RULES, "web")
        assert fe.framework == "vue"
        assert fe.language == "javascript"
        assert fe.libraries == []
        assert fe.build == "vite"

    def test_react_ui_library(self):
        fe = extractors.extract_frontend("a clean ui design", RULES, "web")
        assert fe.framework == "react"
        assert "@mui/material" in fe.libraries

    def test_next_build(self):
        assert extractors.extract_frontend("built with nextjs", RULES, "web").build == "next"

    def test_database_versions(self):
        assert extractors.extract_database("mongo backed", RULES, DEFAULTS).version == "6.0"
        assert extractors.extract_database("on sqlite", RULES, DEFAULTS).version == "latest"

    def test_cache(self):
        assert extractors.extract_cache("use redis for sessions").type == "redis"
        assert extractors.extract_cache("no extras").type == ""


class TestNonFunctionals:
    def test_security_extras(self):
        sec = extractors.extract_security("oauth login with aes at rest and an audit trail")
        assert sec.authentication == ["jwt", "oauth2"]
        assert "aes256" in sec.encryption
        assert sec.audit is True

    def test_gdpr_retention(self):
        comp = extractors.extract_compliance("gdpr applies")
        assert comp.standards == ["gdpr"]
        assert comp.data_retention == "2years"
        assert comp.audit_log is True

    def test_pci_standard_name(self):
        assert extractors.extract_compliance("pci scope").standards == ["pci-dss"]

    def test_fast_performance(self):
        assert extractors.extract_performance("a real-time feed").response_time == "100ms"
        assert extractors.extract_performance("a feed").response_time == "500ms"


class TestData:
    def test_entity_fields(self):
        entities = extractors.extract_entities("users and invoices", RULES)
        assert [e.name for e in entities] == ["User", "Invoice"]
        user = entities[0]
        assert [f.name for f in user.fields][:2] == ["id", "email"]
        assert user.constraints[0].type == "primary_key"

    def test_entity_order_follows_table(self):
        entities = extractors.extract_entities("orders placed by users", RULES)
        assert [e.name for e in entities] == ["User", "Order"]

    def test_relationships_need_both_ends(self):
        only_orders = extractors.extract_entities("orders", RULES)
        assert extractors.extract_relationships(only_orders, RULES) == []


class TestEndpoints:
    def test_five_per_entity(self):
        entities = extractors.extract_entities("users and products", RULES)
        endpoints = extractors.build_endpoints(entities)
        assert len(endpoints) == 10
        assert [(e.method, e.path) for e in endpoints[:5]] == [
            ("GET", "/user"),
            ("GET", "/user/{id}"),
            ("POST", "/user"),
            ("PUT", "/user/{id}"),
            ("DELETE", "/user/{id}"),
        ]

    def test_no_entities_no_endpoints(self):
        assert extractors.build_endpoints([]) == []

    def test_api_type(self):
        assert extractors.extract_api("a graphql gateway", []).type == "graphql"
        assert extractors.extract_api("grpc services", []).type == "grpc"
        assert extractors.extract_api("plain", []).type == "rest"
