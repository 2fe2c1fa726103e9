"""Unit tests for route template parsing, matching and URL generation."""

import pytest

from bestregi.server.routing import RouteTemplate, RouteTemplateError

DEFAULT_ROUTE = "{controller=Home}/{action=Index}/{id?}"


class TestParse:
    def test_default_route_segments(self):
        template = RouteTemplate.parse(DEFAULT_ROUTE)

        assert template.parameter_names == ["controller", "action", "id"]
        assert template.defaults == {"controller": "Home", "action": "Index"}
        assert template.segments[2].optional is True

    def test_literal_and_catch_all(self):
        template = RouteTemplate.parse("files/{*path}")

        assert template.segments[0].literal == "files"
        assert template.segments[1].catch_all is True

    @pytest.mark.parametrize(
        "text",
        [
            "{id}/{id}",
            "{*rest}/tail",
            "{controller",
            "a//b",
            "{1bad}",
        ],
    )
    def test_invalid_templates(self, text):
        with pytest.raises(RouteTemplateError):
            RouteTemplate.parse(text)


class TestMatch:
    @pytest.fixture
    def template(self):
        return RouteTemplate.parse(DEFAULT_ROUTE)

    def test_root_uses_defaults_without_id(self, template):
        assert template.match("/") == {"controller": "Home", "action": "Index"}

    def test_controller_only(self, template):
        assert template.match("/Products") == {"controller": "Products", "action": "Index"}

    def test_full_path_with_id(self, template):
        assert template.match("/Products/Details/42") == {"controller": "Products", "action": "Details", "id": "42"}

    def test_values_taken_as_is(self, template):
        assert template.match("/Home/Search/a b")["id"] == "a b"
        assert template.match("/Home/Search/a%25b")["id"] == "a%25b"

    def test_trailing_slash_ignored(self, template):
        assert template.match("/Home/Privacy/") == {"controller": "Home", "action": "Privacy"}

    def test_extra_segments_fail(self, template):
        assert template.match("/a/b/c/d") is None

    def test_literals_case_insensitive(self):
        template = RouteTemplate.parse("admin/{action}")

        assert template.match("/ADMIN/users") == {"action": "users"}
        assert template.match("/other/users") is None

    def test_required_parameter_missing(self):
        assert RouteTemplate.parse("{controller}/{action}").match("/Home") is None

    def test_catch_all_collects_rest(self):
        template = RouteTemplate.parse("files/{*path}")

        assert template.match("/files/css/site.css") == {"path": "css/site.css"}
        assert template.match("/files") == {}


class TestBuild:
    @pytest.fixture
    def template(self):
        return RouteTemplate.parse(DEFAULT_ROUTE)

    def test_defaults_trimmed_to_root(self, template):
        assert template.build({"controller": "Home", "action": "Index"}) == "/"

    def test_default_comparison_ignores_case(self, template):
        assert template.build({"controller": "home", "action": "index"}) == "/"

    def test_non_default_action(self, template):
        assert template.build({"controller": "Home", "action": "Privacy"}) == "/Home/Privacy"

    def test_id_keeps_defaults_before_it(self, template):
        assert template.build({"controller": "Home", "action": "Index", "id": "7"}) == "/Home/Index/7"

    def test_values_are_quoted(self, template):
        assert template.build({"controller": "Home", "action": "Search", "id": "a b/c"}) == "/Home/Search/a%20b%2Fc"

    def test_missing_required_value(self):
        assert RouteTemplate.parse("{controller}/{action}").build({"controller": "Home"}) is None
