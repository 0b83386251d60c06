"""Tests for format_result and the listing renderers."""

import json

from deps_order.output.console import CONSOLE_WIDTH, create_console, get_output
from deps_order.output.formatters import OutputSettings, format_result
from deps_order.output.renderers import render_listing
from deps_order.services.result import ServiceError, ServiceResult

ITEMS = [
    {"name": "ext", "version": "1.0.3", "workspace_member": False, "path": "/reg/ext-1.0.3"},
    {"name": "lib", "version": "0.2.0", "workspace_member": True, "path": "/ws/lib"},
]


def _order(items: list = ITEMS) -> ServiceResult:
    return ServiceResult(ok=True, op="order", data={"count": len(items), "items": items})


class TestListing:
    def test_normal(self) -> None:
        assert render_listing(ITEMS) == "ext 1.0.3\nlib 0.2.0"

    def test_short(self) -> None:
        assert render_listing(ITEMS, style="short") == "ext\nlib"

    def test_empty(self) -> None:
        assert render_listing([]) == ""


class TestFormatResult:
    def test_default_is_normal_listing(self) -> None:
        assert format_result(_order()) == "ext 1.0.3\nlib 0.2.0"

    def test_verbose_table(self) -> None:
        output = format_result(_order(), settings=OutputSettings(style="verbose"))
        assert "Name" in output
        assert "/ws/lib" in output
        assert "yes" in output
        assert "2 packages" in output

    def test_json(self) -> None:
        output = format_result(_order(), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["data"]["items"][1]["name"] == "lib"

    def test_exec_summary(self) -> None:
        result = ServiceResult(
            ok=True, op="exec", data={"count": 2, "completed": ["ext@1.0.3", "lib@0.2.0"]}
        )
        output = format_result(result)
        assert output.startswith("OK")
        assert "2 of 2 packages" in output

    def test_error(self) -> None:
        result = ServiceResult(
            ok=False,
            op="exec",
            data={
                "completed": ["ext@1.0.3"],
                "failed": [{"package": "lib@0.2.0", "exit_status": 2}],
                "skipped": ["app@0.1.0"],
            },
            error=ServiceError(code="COMMAND_FAILED", message="Command for 'lib@0.2.0' exited with status 2"),
        )
        output = format_result(result)
        assert output.startswith("ERROR")
        assert "exited with status 2" in output
        assert "completed: ext@1.0.3" in output
        assert "not run: app@0.1.0" in output

    def test_error_lists_additional_failures(self) -> None:
        result = ServiceResult(
            ok=False,
            op="exec",
            data={
                "failed": [
                    {"package": "ext@1.0.3", "exit_status": 1},
                    {"package": "app@0.1.0", "exit_status": 4},
                ]
            },
            error=ServiceError(code="COMMAND_FAILED", message="2 commands failed"),
        )
        output = format_result(result)
        assert "also failed: app@0.1.0 (status 4)" in output


class TestConsole:
    def test_fixed_width_buffer(self) -> None:
        console = create_console()
        assert console.width == CONSOLE_WIDTH
        console.print("[deps.name]lib[/]")
        assert get_output(console).strip() == "lib"
