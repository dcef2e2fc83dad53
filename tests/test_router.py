"""Tests for the tool catalog, argument decoding, dispatch and tool policy."""

import pytest

from orchestrator.errors import DecodeError, InvalidArgumentsError, ToolDeniedError, UnknownToolError
from orchestrator.router import TOOL_CATALOG, ToolRouter, decode_arguments, get_tools_and_specs
from tools.permissions import DANGEROUS_TOOLS, ToolPolicy, has_permission, is_dangerous


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class TestCatalog:

    def test_three_function_tools(self):
        names = [spec["function"]["name"] for spec in TOOL_CATALOG]
        assert names == ["postgres", "shell", "web_search"]
        assert all(spec["type"] == "function" for spec in TOOL_CATALOG)

    def test_parameter_schemas(self):
        by_name = {spec["function"]["name"]: spec["function"] for spec in TOOL_CATALOG}

        assert by_name["postgres"]["parameters"]["required"] == ["query"]
        assert by_name["shell"]["parameters"]["required"] == ["command"]

        search = by_name["web_search"]["parameters"]
        assert search["type"] == "object"
        assert search["required"] == ["query"]
        assert search["properties"]["max_results"]["type"] == "integer"

    def test_catalog_is_stable(self):
        assert get_tools_and_specs() == TOOL_CATALOG
        assert isinstance(TOOL_CATALOG, tuple)

    def test_router_catalog_only_lists_registered_tools(self, fake_handlers):
        router = ToolRouter(handlers={"shell": fake_handlers["shell"]})
        assert [s["function"]["name"] for s in router.catalog] == ["shell"]


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

class TestDecodeArguments:

    def test_flat_string_mapping(self):
        assert decode_arguments('{"query": "select 1"}') == {"query": "select 1"}

    def test_empty_payload_is_empty_mapping(self):
        assert decode_arguments("") == {}
        assert decode_arguments("   ") == {}

    def test_null_payload_is_empty_mapping(self):
        assert decode_arguments("null") == {}

    def test_null_payload_fails_at_required_field(self):
        with pytest.raises(InvalidArgumentsError):
            ToolRouter().dispatch("shell", "null")

    def test_integers_kept_as_text(self):
        assert decode_arguments('{"query": "x", "max_results": 3}') == {"query": "x", "max_results": "3"}

    @pytest.mark.parametrize("raw", [
        "{not json",
        '["a", "b"]',
        '"just a string"',
        '{"query": null}',
        '{"query": true}',
        '{"query": 1.5}',
        '{"query": {"nested": "x"}}',
        '{"query": ["a"]}',
    ])
    def test_rejects_malformed_payloads(self, raw):
        with pytest.raises(DecodeError):
            decode_arguments(raw)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class TestDispatch:

    def test_routes_to_matching_executor(self, fake_handlers, recorded_calls):
        router = ToolRouter(handlers=fake_handlers)

        out = router.dispatch("postgres", '{"query":"select 1"}')

        assert out == "postgres ok\n"
        assert recorded_calls == [("postgres", {"query": "select 1"})]

    @pytest.mark.parametrize("name", ["postgres", "shell", "web_search"])
    def test_known_names_never_unknown(self, fake_handlers, name):
        router = ToolRouter(handlers=fake_handlers)
        router.dispatch(name, '{"query": "q", "command": "c"}')

    def test_unknown_name(self, fake_handlers, recorded_calls):
        router = ToolRouter(handlers=fake_handlers)

        with pytest.raises(UnknownToolError) as exc:
            router.dispatch("format_disk", "{}")

        assert exc.value.name == "format_disk"
        assert recorded_calls == []

    def test_handler_outside_catalog_is_rejected(self, fake_handlers):
        """Every dispatchable name must also be advertised to the model."""
        with pytest.raises(ValueError, match="format_disk"):
            ToolRouter(handlers={**fake_handlers, "format_disk": fake_handlers["shell"]})

    def test_catalog_name_without_handler_is_unknown(self, fake_handlers, recorded_calls):
        router = ToolRouter(handlers={"shell": fake_handlers["shell"]})

        with pytest.raises(UnknownToolError):
            router.dispatch("postgres", '{"query": "select 1"}')

        assert recorded_calls == []

    def test_decode_happens_before_routing(self, fake_handlers):
        router = ToolRouter(handlers=fake_handlers)
        with pytest.raises(DecodeError):
            router.dispatch("format_disk", "{oops")

    def test_default_router_uses_builtin_tools(self):
        router = ToolRouter()
        assert set(router.handlers) == {"postgres", "shell", "web_search"}
        assert router.catalog == TOOL_CATALOG


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

class TestPolicy:

    def test_dangerous_tools(self):
        assert DANGEROUS_TOOLS == {"shell", "postgres"}
        assert is_dangerous("shell")
        assert not is_dangerous("web_search")

    def test_default_policy_allows_everything(self):
        policy = ToolPolicy()
        assert has_permission(policy, "shell", {"command": "rm -rf /tmp/x"})
        assert has_permission(policy, "web_search", {"query": "x"})

    def test_allow_list(self):
        policy = ToolPolicy(allowed=frozenset({"web_search"}))
        assert has_permission(policy, "web_search", {})
        assert not has_permission(policy, "shell", {})

    def test_confirm_only_asked_for_dangerous_tools(self):
        asked = []

        def confirm(name, args):
            asked.append(name)
            return False

        policy = ToolPolicy(confirm=confirm)
        assert has_permission(policy, "web_search", {"query": "x"})
        assert not has_permission(policy, "postgres", {"query": "drop table t"})
        assert asked == ["postgres"]

    def test_denied_call_does_not_run(self, fake_handlers, recorded_calls):
        router = ToolRouter(handlers=fake_handlers, policy=ToolPolicy(confirm=lambda name, args: False))

        with pytest.raises(ToolDeniedError, match="tool shell denied"):
            router.dispatch("shell", '{"command": "ls"}')

        assert recorded_calls == []
