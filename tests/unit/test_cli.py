"""Tests for the scfv-plan CLI.

Runs commands through CliRunner against an isolated config/data dir and
checks the JSON output where a command offers one.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from scfvplan.cli.__main__ import cli
from scfvplan.cli.renderers.cost_renderer import format_brl
from scfvplan.sdk import get_project, list_projects


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project_id(isolated_env, runner):
    result = runner.invoke(cli, ["project", "create", "Plano 2025"])
    assert result.exit_code == 0, result.output
    return list_projects()[0].id


def test_format_brl():
    assert format_brl(1234.5) == "R$ 1.234,50"
    assert format_brl(0) == "R$ 0,00"
    assert format_brl(2958.444) == "R$ 2.958,44"
    assert format_brl(None) == "-"


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "scfv-plan" in result.output


class TestProjectCommands:

    def test_create_activates(self, runner, project_id):
        result = runner.invoke(cli, ["project", "list"])
        assert result.exit_code == 0
        assert f"* {project_id[:8]}  Plano 2025" in result.output

    def test_show_json(self, runner, project_id):
        result = runner.invoke(cli, ["project", "show", "--format", "json"])
        assert result.exit_code == 0, result.output
        summary = json.loads(result.output)
        assert summary["project_id"] == project_id
        assert summary["grand_total"] == 0

    def test_use_unknown(self, runner, project_id):
        result = runner.invoke(cli, ["project", "use", "nope"])
        assert result.exit_code != 0
        assert "No project matches" in result.output

    def test_delete_last_refused(self, runner, project_id):
        result = runner.invoke(cli, ["project", "delete", project_id[:8], "--force"])
        assert result.exit_code != 0
        assert "At least one project" in result.output


class TestHrCommands:

    def test_add_and_list(self, runner, project_id):
        result = runner.invoke(cli, ["hr", "add", "Educador Social", "--salary", "2000"])
        assert result.exit_code == 0, result.output
        assert "Annual cost: R$ 35.501,33" in result.output

        result = runner.invoke(cli, ["hr", "list", "--format", "json"])
        payload = json.loads(result.output)
        assert payload["project"]["id"] == project_id
        assert len(payload["rows"]) == 1
        assert payload["rows"][0]["cost"]["base"] == 2000
        assert payload["totals"]["annual_total"] == pytest.approx(35501.333333, abs=1e-4)

    def test_add_invalid(self, runner, project_id):
        result = runner.invoke(cli, ["hr", "add", "Educador", "--salary", "0", "--months", "13"])
        assert result.exit_code != 0
        assert "gross_salary must be positive" in result.output
        assert "months must be" in result.output
        assert get_project(project_id).hr_items == []

    def test_remove(self, runner, project_id):
        runner.invoke(cli, ["hr", "add", "Psicólogo", "--salary", "4200"])
        employee_id = get_project(project_id).hr_items[0].id
        result = runner.invoke(cli, ["hr", "remove", employee_id[:8]])
        assert result.exit_code == 0, result.output
        assert get_project(project_id).hr_items == []

    def test_show(self, runner, project_id):
        runner.invoke(cli, ["hr", "add", "Psicólogo", "--salary", "4200"])
        employee_id = get_project(project_id).hr_items[0].id
        result = runner.invoke(cli, ["hr", "show", employee_id[:8]])
        assert result.exit_code == 0, result.output
        assert "Psicólogo x1" in result.output

    def test_show_unknown_id(self, runner, project_id):
        result = runner.invoke(cli, ["hr", "show", "zzz"])
        assert result.exit_code != 0
        assert "No employee matches id 'zzz'" in result.output

    def test_preview_saves_nothing(self, runner, project_id):
        result = runner.invoke(
            cli, ["hr", "preview", "--salary", "2000", "--benefits", "150", "-q", "2", "--format", "json"]
        )
        assert result.exit_code == 0, result.output
        cost = json.loads(result.output)
        assert cost["base"] == 4000
        assert cost["benefits_total"] == 300
        assert get_project(project_id).hr_items == []

    def test_list_text(self, runner, project_id):
        runner.invoke(cli, ["hr", "add", "Cozinheira", "--salary", "1800"])
        result = runner.invoke(cli, ["hr", "list"])
        assert result.exit_code == 0, result.output
        assert "Cozinheira" in result.output


class TestGoodsCommands:

    def test_add_list_adjust(self, runner, project_id):
        result = runner.invoke(cli, [
            "goods", "add", "Papel A4", "--rubric", "3.3.90.30.16",
            "--unit-value", "25", "-q", "4", "-f", "6",
        ])
        assert result.exit_code == 0, result.output
        assert "Annual total: R$ 600,00" in result.output

        result = runner.invoke(cli, ["goods", "adjust", "10", "--force"])
        assert result.exit_code == 0, result.output
        assert "R$ 600,00 -> R$ 660,00" in result.output

        payload = json.loads(runner.invoke(cli, ["goods", "list", "--format", "json"]).output)
        assert payload["total"] == pytest.approx(660)
        assert payload["groups"][0]["rubric"] == "3.3.90.30.16 - Material de Expediente"

    def test_unknown_rubric(self, runner, project_id):
        result = runner.invoke(cli, ["goods", "add", "X", "--rubric", "9.9", "--unit-value", "1"])
        assert result.exit_code != 0
        assert "unknown rubric code" in result.output

    def test_scale(self, runner, project_id):
        runner.invoke(cli, ["goods", "add", "Café", "--rubric", "3.3.90.30.07", "--unit-value", "10"])
        result = runner.invoke(cli, ["goods", "scale", "60"], input="y\n")
        assert result.exit_code == 0, result.output
        assert get_project(project_id).items[0].unit_value == 5

    def test_scale_declined(self, runner, project_id):
        runner.invoke(cli, ["goods", "add", "Café", "--rubric", "3.3.90.30.07", "--unit-value", "10"])
        result = runner.invoke(cli, ["goods", "scale", "60"], input="n\n")
        assert result.exit_code != 0
        assert get_project(project_id).items[0].unit_value == 10

    @pytest.mark.parametrize("target", ["0", "-500"])
    def test_scale_rejects_non_positive_target(self, runner, project_id, target):
        runner.invoke(cli, ["goods", "add", "Papel", "--rubric", "3.3.90.30.16", "--unit-value", "10"])
        result = runner.invoke(cli, ["goods", "scale", "--force", "--", target])
        assert result.exit_code != 0
        assert "greater than zero" in result.output
        assert get_project(project_id).items[0].unit_value == 10

    def test_rubrics(self, runner):
        result = runner.invoke(cli, ["goods", "rubrics"])
        assert "3.3.90.30.07" in result.output


class TestRatesCommands:

    def test_show_defaults(self, runner, isolated_env):
        result = runner.invoke(cli, ["rates", "show", "--format", "json"])
        assert json.loads(result.output)["provision_inss_rate"] == 0.293

    def test_set_changes_costs(self, runner, project_id):
        runner.invoke(cli, ["hr", "add", "Educador", "--salary", "2000"])
        before = json.loads(runner.invoke(cli, ["hr", "list", "--format", "json"]).output)

        result = runner.invoke(cli, ["rates", "set", "pis_rate", "2"])
        assert result.exit_code == 0, result.output

        after = json.loads(runner.invoke(cli, ["hr", "list", "--format", "json"]).output)
        assert after["rows"][0]["cost"]["pis"] == pytest.approx(2 * before["rows"][0]["cost"]["pis"])
        assert after["rows"][0]["cost"]["fgts"] == before["rows"][0]["cost"]["fgts"]

    def test_set_fraction_and_reset(self, runner, isolated_env):
        result = runner.invoke(cli, ["rates", "set-fraction", "thirteenth_salary_provision_rate", "13"])
        assert result.exit_code == 0, result.output
        rates = json.loads(runner.invoke(cli, ["rates", "show", "--format", "json"]).output)
        assert rates["thirteenth_salary_provision_rate"] == 1 / 13

        result = runner.invoke(cli, ["rates", "reset", "--force"])
        assert result.exit_code == 0
        assert not (isolated_env["config_dir"] / "rates.yaml").exists()

    def test_zero_denominator(self, runner, isolated_env):
        result = runner.invoke(cli, ["rates", "set-fraction", "thirteenth_salary_provision_rate", "0"])
        assert result.exit_code != 0
        assert "non-zero" in result.output

    def test_unknown_key(self, runner, isolated_env):
        result = runner.invoke(cli, ["rates", "set", "cofins", "3"])
        assert result.exit_code == 2


class TestSettingsCommands:

    def test_show(self, runner, isolated_env):
        result = runner.invoke(cli, ["settings", "show"])
        assert result.exit_code == 0
        assert str(isolated_env["data_dir"]) in result.output
        assert str(isolated_env["projects_dir"]) in result.output
        assert "defaults apply" in result.output

    def test_show_json_lists_paths_and_active_project(self, runner, project_id, isolated_env):
        result = runner.invoke(cli, ["settings", "show", "--format", "json"])
        assert result.exit_code == 0, result.output
        info = json.loads(result.output)
        assert info["projects_dir"] == str(isolated_env["projects_dir"])
        assert info["exports_dir"] == str(isolated_env["data_dir"] / "exports")
        assert info["project_count"] == 1
        assert info["active_project"] == project_id

    def test_show_names_active_project(self, runner, project_id):
        result = runner.invoke(cli, ["settings", "show"])
        assert f"Plano 2025 ({project_id[:8]})" in result.output

    def test_data_dir_set_and_clear(self, runner, project_id, tmp_path):
        target = tmp_path / "elsewhere"
        result = runner.invoke(cli, ["settings", "data-dir", str(target)])
        assert result.exit_code == 0, result.output
        assert (target / "projects").is_dir()
        assert (target / "exports").is_dir()
        assert "were not moved" in result.output

        result = runner.invoke(cli, ["settings", "data-dir", "--clear"])
        assert "Cleared data_dir" in result.output


class TestExportCommand:

    def test_export(self, runner, project_id, tmp_path):
        runner.invoke(cli, ["hr", "add", "Educador", "--salary", "2000"])
        output = tmp_path / "plano.xlsx"
        result = runner.invoke(cli, ["export", "--output", str(output)])
        assert result.exit_code == 0, result.output
        assert output.exists()
        assert "Exported 'Plano 2025'" in result.output


class TestAdviseCommands:

    def test_price(self, runner, isolated_env):
        with patch("scfvplan.gemini_client.process_json_prompt", return_value={"price": 19.9, "confidence": "high"}):
            result = runner.invoke(cli, ["advise", "price", "Café 500g"])
        assert result.exit_code == 0, result.output
        assert "R$ 19,90 (confidence: high)" in result.output

    def test_unavailable(self, runner, isolated_env):
        with patch("scfvplan.gemini_client.process_json_prompt", side_effect=RuntimeError("no cli")):
            result = runner.invoke(cli, ["advise", "rubric", "Detergente"])
        assert result.exit_code == 0
        assert "No advice available" in result.output

    def test_reduce_apply(self, runner, project_id):
        runner.invoke(cli, ["goods", "add", "Café", "--rubric", "3.3.90.30.07", "--unit-value", "10"])
        item_id = get_project(project_id).items[0].id
        answer = [{"itemId": item_id, "originalValue": 120, "suggestedValue": 60, "reason": "cortar"}]

        with patch("scfvplan.gemini_client.process_json_prompt", return_value=answer):
            result = runner.invoke(cli, ["advise", "reduce", "50", "--apply"], input="y\n")

        assert result.exit_code == 0, result.output
        assert "Reductions applied." in result.output
        assert get_project(project_id).items[0].unit_value == 5
