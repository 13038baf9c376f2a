"""Tests for switchyard.routing.route — Route and ParameterSpec."""

from typing import Any
from urllib.parse import parse_qsl, urlsplit

import pytest

from switchyard.config import RouterConfig
from switchyard.errors import ConfigurationError, InstantiationError
from switchyard.references import Capabilities
from switchyard.routing.query import parse_query
from switchyard.routing.route import ParameterSpec, Route, normalize_definition

calls: list[tuple[Any, ...]] = []


def show_post(route: Route, parameters: dict[str, Any]) -> str:
    calls.append((route, parameters))
    return f"post {parameters.get('id')}"


def tick(route: Route) -> str:
    calls.append((route,))
    return "tick"


def allow(route: Route) -> bool:
    return True


def deny(route: Route) -> bool:
    return False


def is_numeric(route: Route, value: Any) -> bool:
    return isinstance(value, str) and value.isdigit()


class Broken:
    def __init__(self, required: str) -> None:
        self.required = required

    def handle(self, route: Route, parameters: dict[str, Any]) -> None:
        pass


@pytest.fixture(autouse=True)
def _reset_calls() -> None:
    calls.clear()


@pytest.fixture
def capabilities() -> Capabilities:
    caps = Capabilities()
    for fn in (show_post, tick, allow, deny, is_numeric):
        caps.add_function(fn.__name__, fn)
    caps.add_class("Broken", Broken)
    return caps


def _route(capabilities: Capabilities, **definition: Any) -> Route:
    return Route(definition, name="test", capabilities=capabilities)


class TestDefinition:
    def test_defaults(self, capabilities: Capabilities) -> None:
        route = _route(capabilities)
        assert route.get_methods() == ("ANY",)
        assert route.priority == 10
        assert not route.has_pattern()
        assert route.get_parameters() == {}
        assert not route.has_middleware()
        assert not route.has_target()

    def test_legacy_keys(self, capabilities: Capabilities) -> None:
        route = Route(
            {"regex": r"^/a/(\d+)$", "query_vars": {"id": "$matches[1]"}, "callback": "show_post"},
            capabilities=capabilities,
        )
        assert route.pattern == r"^/a/(\d+)$"
        assert route.extract_parameters("/a/3") == {"id": "3"}
        assert route.has_target()

    def test_keyword_options(self, capabilities: Capabilities) -> None:
        route = Route(pattern="^/x$", method="post", capabilities=capabilities)
        assert route.pattern == "^/x$"
        assert route.get_methods() == ("POST",)

    def test_normalize_definition(self) -> None:
        assert normalize_definition({"regex": "a"}, callback="b") == {"pattern": "a", "target": "b"}

    def test_parameters_without_pattern_rejected(self, capabilities: Capabilities) -> None:
        with pytest.raises(ConfigurationError):
            _route(capabilities, parameters={"id": "$matches[1]"})

    def test_priority_zero_kept(self, capabilities: Capabilities) -> None:
        assert _route(capabilities, priority=0).priority == 0

    def test_empty_pattern_is_path_less(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, pattern="")
        assert not route.has_pattern()
        assert route.get_pattern() is None


class TestMethods:
    def test_case_insensitive(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, method=["get", "Post"])
        assert route.get_methods() == ("GET", "POST")
        assert route.matches_method("get")
        assert route.matches_method("POST")
        assert not route.matches_method("DELETE")

    def test_wildcard(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, method="any")
        assert route.matches_method("DELETE")

    def test_custom_wildcard(self, capabilities: Capabilities) -> None:
        route = Route(
            {"method": "*"}, capabilities=capabilities, config=RouterConfig(wildcard_method="*")
        )
        assert route.matches_method("PATCH")

    def test_setter_invalidates(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, method="GET")
        assert route.get_methods() == ("GET",)
        route.set_methods("put")
        assert route.get_methods() == ("PUT",)

    def test_prepared_once(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, method="GET")
        assert route.get_methods() is route.get_methods()


class TestPathMatch:
    def test_match(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, pattern=r"^/posts/([0-9]+)$")
        assert route.is_path_match("/posts/42")
        assert not route.is_path_match("/posts/abc")

    def test_no_pattern_never_matches(self, capabilities: Capabilities) -> None:
        route = _route(capabilities)
        assert not route.is_path_match("/anything")
        assert route.score("/anything") == 0

    def test_parameter_middleware_accepts(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities,
            pattern=r"^/posts/(\w+)$",
            parameters={"id": {"value": "$matches[1]", "middleware": "is_numeric"}},
        )
        assert route.is_path_match("/posts/42")
        assert not route.is_path_match("/posts/hello")

    def test_parameter_middleware_receives_route_and_value(self) -> None:
        received: list[tuple[Any, Any]] = []

        def record(route: Route, value: Any) -> bool:
            received.append((route, value))
            return True

        route = Route(pattern=r"^/p/(\d+)$", parameters={"id": {"value": "$matches[1]", "middleware": record}})
        assert route.is_path_match("/p/9")
        assert received == [(route, "9")]

    def test_unresolvable_parameter_middleware_passes(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities,
            pattern=r"^/posts/(\w+)$",
            parameters={"id": {"value": "$matches[1]", "middleware": "missing"}},
        )
        assert route.is_path_match("/posts/hello")

    def test_pattern_setter_invalidates(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, pattern=r"^/a$")
        assert route.is_path_match("/a")
        route.set_pattern(r"^/b$")
        assert not route.is_path_match("/a")
        assert route.is_path_match("/b")

    def test_invalid_pattern(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, pattern=r"^/(unclosed$")
        with pytest.raises(ConfigurationError):
            route.get_pattern()


class TestScore:
    def test_literal(self, capabilities: Capabilities) -> None:
        assert _route(capabilities, pattern=r"^/posts/42$").score("/posts/42") == 100

    def test_one_capture(self, capabilities: Capabilities) -> None:
        assert _route(capabilities, pattern=r"^/posts/([0-9]+)$").score("/posts/42") == 50

    def test_three_captures(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, pattern=r"^/(\w+)/(\w+)/([0-9]+)$")
        assert route.score("/a/b/1") == 25

    def test_no_match(self, capabilities: Capabilities) -> None:
        assert _route(capabilities, pattern=r"^/posts$").score("/users") == 0


class TestMiddleware:
    def test_all_pass(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, middleware=["allow", allow])
        assert route.has_middleware()
        assert route.validate_middleware()

    def test_one_rejects(self, capabilities: Capabilities) -> None:
        assert not _route(capabilities, middleware=["allow", "deny"]).validate_middleware()

    def test_single_descriptor(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, middleware="deny")
        assert len(route.get_middleware()) == 1
        assert not route.validate_middleware()

    def test_tuple_is_one_pair(self) -> None:
        class Guard:
            @staticmethod
            def check(route: Route) -> bool:
                return False

        route = Route(middleware=(Guard, "check"))
        assert len(route.get_middleware()) == 1
        assert not route.validate_middleware()

    def test_unresolvable_passes(self, capabilities: Capabilities) -> None:
        assert _route(capabilities, middleware=["missing"]).validate_middleware()

    def test_receives_route(self) -> None:
        seen: list[Route] = []
        route = Route(middleware=[lambda r: seen.append(r) or True])
        assert route.validate_middleware()
        assert seen == [route]

    def test_prepared_once(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, middleware=["allow"])
        assert route.get_middleware() is route.get_middleware()
        first = route.get_middleware()[0]
        assert first.get_callable() is first.get_callable()

    def test_setter_invalidates_only_middleware(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, method="GET", middleware=["allow"])
        methods = route.get_methods()
        route.set_middleware(["deny"])
        assert not route.validate_middleware()
        assert route.get_methods() is methods


class TestParameters:
    def test_scenario_extract(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities, pattern=r"^/posts/([0-9]+)$", parameters={"id": "$matches[1]"}
        )
        assert route.extract_parameters("/posts/42") == {"id": "42"}

    def test_literals_and_empties(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities,
            pattern=r"^/posts(/[0-9]+)?$",
            parameters={
                "type": "post",
                "page": "$matches[1]",
                "empty": "",
                "none": None,
                "off": False,
            },
        )
        assert route.extract_parameters("/posts") == {"type": "post"}
        assert route.extract_parameters("/posts/2") == {"type": "post", "page": "/2"}

    def test_order_preserved(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities,
            pattern=r"^/(\w+)/(\w+)$",
            parameters={"b": "$matches[2]", "a": "$matches[1]"},
        )
        assert list(route.extract_parameters("/x/y")) == ["b", "a"]

    def test_parameter_spec_from_raw(self, capabilities: Capabilities) -> None:
        spec = ParameterSpec.from_raw("id", {"value": "$matches[1]", "middleware": "allow"}, capabilities)
        assert spec.value == "$matches[1]"
        assert spec.middleware.is_function_reference()

        nested = ParameterSpec.from_raw("filters", {"tag": "$matches[1]"}, capabilities)
        assert nested.value == {"tag": "$matches[1]"}
        assert not nested.middleware.has_callable_reference()

    def test_non_matching_path_drops_placeholders(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities, pattern=r"^/posts/([0-9]+)$", parameters={"id": "$matches[1]", "t": "x"}
        )
        assert route.extract_parameters("/users") == {"t": "x"}


class TestRewrite:
    def test_build(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities,
            pattern=r"^/(\w+)/([0-9]+)$",
            parameters={"post_type": "$matches[1]", "p": "$matches[2]"},
        )
        assert route.build_rewrite_target("/news/42") == "index.php?post_type=news&p=42"

    def test_round_trip(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities,
            pattern=r"^/search/(.+)$",
            parameters={"q": "$matches[1]", "empty": "", "kind": "all & more"},
        )
        path = "/search/hello world?&="
        rewrite = route.build_rewrite_target(path)
        assert rewrite.startswith("index.php?")
        parsed = dict(parse_qsl(urlsplit(rewrite).query))
        assert parsed == route.extract_parameters(path)

    def test_round_trip_nested(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities,
            pattern=r"^/t/(\w+)(?:/(\w+))?$",
            parameters={"tags": ["$matches[1]", "$matches[2]"], "filter": {"id": "$matches[1]"}},
        )
        for path in ("/t/a", "/t/a/b"):
            rewrite = route.build_rewrite_target(path)
            assert parse_query(urlsplit(rewrite).query) == route.extract_parameters(path)

    def test_nested_values_keep_captures(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, pattern=r"^/p/([0-9]+)$", parameters={"filter": {"id": "$matches[1]"}})
        assert route.build_rewrite_target("/p/7") == "index.php?filter%5Bid%5D=7"

    def test_unfilled_list_item_dropped(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities,
            pattern=r"^/t/(\w+)(?:/(\w+))?$",
            parameters={"tags": ["$matches[1]", "$matches[2]"]},
        )
        assert route.extract_parameters("/t/a") == {"tags": ["a"]}
        assert route.build_rewrite_target("/t/a") == "index.php?tags%5B0%5D=a"

    def test_custom_entry_point(self, capabilities: Capabilities) -> None:
        route = Route(
            {"pattern": r"^/x$", "parameters": {"a": "b"}},
            capabilities=capabilities,
            config=RouterConfig(entry_point="front.php"),
        )
        assert route.build_rewrite_target("/x") == "front.php?a=b"


class TestDispatch:
    def test_path_bound(self, capabilities: Capabilities) -> None:
        route = _route(
            capabilities,
            pattern=r"^/posts/([0-9]+)$",
            parameters={"id": "$matches[1]"},
            target="show_post",
        )
        assert route.dispatch("/posts/42") == "post 42"
        assert calls == [(route, {"id": "42"})]

    def test_path_less(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, target="tick")
        assert route.dispatch() == "tick"
        assert calls == [(route,)]

    def test_unresolved_is_noop(self, capabilities: Capabilities) -> None:
        assert _route(capabilities, target="missing").dispatch() is None
        assert _route(capabilities).dispatch() is None
        assert calls == []

    def test_non_callable_instance_is_noop(self) -> None:
        class Plain:
            pass

        assert Route(target=Plain).dispatch() is None

    def test_instantiation_error_propagates(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, pattern=r"^/b$", target="Broken@handle")
        with pytest.raises(InstantiationError):
            route.dispatch("/b")

    def test_target_setter(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, target="missing")
        assert route.dispatch() is None
        route.set_target("tick")
        assert route.dispatch() == "tick"

    def test_collaborators_injected(self) -> None:
        class Model:
            pass

        class View:
            pass

        class Controller:
            def __init__(self, model: Any = None, view: Any = None) -> None:
                self.model = model
                self.view = view

            def show(self, route: Route, parameters: dict[str, Any]) -> "Controller":
                return self

        caps = Capabilities()
        caps.add_class("Controller", Controller)
        caps.add_class("Model", Model)
        caps.add_class("View", View)
        route = Route(
            {"pattern": "^/c$", "target": "Controller@show", "model": "Model", "view": "View"},
            capabilities=caps,
        )
        controller = route.dispatch("/c")
        assert isinstance(controller.model, Model)
        assert isinstance(controller.view, View)

    def test_fresh_instance_per_dispatch(self) -> None:
        class Counter:
            built = 0

            def __init__(self) -> None:
                Counter.built += 1
                self.seen: list[str] = []

            def show(self, route: Route, parameters: dict[str, Any]) -> list[str]:
                self.seen.append(parameters["n"])
                return self.seen

        caps = Capabilities()
        caps.add_class("Counter", Counter)
        route = Route(
            {"pattern": r"^/c/([0-9]+)$", "parameters": {"n": "$matches[1]"}, "target": "Counter@show"},
            capabilities=caps,
        )

        assert route.dispatch("/c/1") == ["1"]
        assert route.dispatch("/c/2") == ["2"]
        assert Counter.built == 2

    def test_repr(self, capabilities: Capabilities) -> None:
        route = _route(capabilities, pattern="^/a$", method="GET", priority=3)
        assert repr(route) == "<Route test [GET] ^/a$ p=3>"
        assert repr(_route(capabilities)) == "<Route test [ANY] (session) p=10>"
