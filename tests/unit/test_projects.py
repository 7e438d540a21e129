"""Tests for the project store (JSON files under data_dir/projects)."""

import json

import pytest

from scfvplan.sdk import (
    DEFAULT_RATE_TABLE,
    ProjectNotFoundError,
    ProjectStoreError,
    compute_cost,
    create_project,
    delete_project,
    get_active_project,
    get_project,
    get_setting,
    list_projects,
    new_employee,
    new_goods_item,
    project_summary,
    resolve_project,
    set_active_project,
)
from scfvplan.sdk.projects import (
    add_employee,
    add_goods_item,
    get_employee,
    remove_employee,
    remove_goods_item,
    replace_goods_items,
)


def backdate(isolated_env, proj, created_at):
    """Rewrite a project's created_at (projects made in the same ms tie)."""
    path = isolated_env["projects_dir"] / f"{proj.id}.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    data["created_at"] = created_at
    path.write_text(json.dumps(data), encoding="utf-8")


class TestProjectCrud:

    def test_create_and_get(self, isolated_env):
        proj = create_project("Plano 2025", start_date="2025-01-01", end_date="2025-12-31")
        assert (isolated_env["projects_dir"] / f"{proj.id}.json").exists()

        loaded = get_project(proj.id)
        assert loaded.title == "Plano 2025"
        assert loaded.start_date == "2025-01-01"
        assert loaded.items == [] and loaded.hr_items == []

    def test_default_dates_span_a_year(self, isolated_env):
        proj = create_project("Plano")
        start_year = int(proj.start_date[:4])
        assert int(proj.end_date[:4]) == start_year + 1
        assert proj.end_date[5:] in (proj.start_date[5:], "02-28")

    def test_empty_title_rejected(self, isolated_env):
        with pytest.raises(ValueError):
            create_project("   ")

    def test_prefix_lookup(self, isolated_env):
        proj = create_project("Plano")
        assert get_project(proj.id[:8]).id == proj.id

    def test_not_found(self, isolated_env):
        with pytest.raises(ProjectNotFoundError):
            get_project("does-not-exist")

    def test_list_sorted_and_skips_bad_files(self, isolated_env):
        first = create_project("A")
        second = create_project("B")
        backdate(isolated_env, first, 1000)
        (isolated_env["projects_dir"] / "broken.json").write_text("{not json")

        ids = [p.id for p in list_projects()]
        assert ids.index(first.id) < ids.index(second.id)
        assert len(ids) == 2

    def test_delete(self, isolated_env):
        keep = create_project("Keep")
        drop = create_project("Drop")
        set_active_project(drop.id)

        delete_project(drop.id)
        assert [p.id for p in list_projects()] == [keep.id]
        assert get_setting("active_project") is None

    def test_cannot_delete_last_project(self, isolated_env):
        only = create_project("Only")
        with pytest.raises(ProjectStoreError, match="At least one project"):
            delete_project(only.id)


class TestActiveProject:

    def test_empty_store_creates_default(self, isolated_env):
        proj = get_active_project()
        assert proj.title.startswith("Novo Orçamento")
        assert len(list_projects()) == 1

    def test_falls_back_to_oldest(self, isolated_env):
        oldest = create_project("Old")
        create_project("New")
        backdate(isolated_env, oldest, 1000)
        assert get_active_project().id == oldest.id

    def test_set_active(self, isolated_env):
        create_project("Old")
        new = create_project("New")
        set_active_project(new.id[:6])
        assert get_setting("active_project") == new.id
        assert resolve_project().id == new.id

    def test_stale_active_setting(self, isolated_env):
        proj = create_project("Only")
        settings_path = isolated_env["config_dir"] / "settings.json"
        settings = json.loads(settings_path.read_text())
        settings["active_project"] = "gone"
        settings_path.write_text(json.dumps(settings))
        assert get_active_project().id == proj.id


class TestLineItems:

    def test_employee_roundtrip_stores_no_costs(self, isolated_env):
        proj = create_project("Plano")
        emp = new_employee("Psicólogo", gross_salary=4200, quantity=2, benefits=300)
        add_employee(proj.id, emp)

        raw = json.loads((isolated_env["projects_dir"] / f"{proj.id}.json").read_text(encoding="utf-8"))
        assert raw["hr_items"][0]["role"] == "Psicólogo"
        assert "annual_total" not in raw["hr_items"][0]

        assert get_project(proj.id).hr_items == [emp]

    def test_remove_employee_by_prefix(self, isolated_env):
        proj = create_project("Plano")
        emp = new_employee("Educador", gross_salary=2000)
        add_employee(proj.id, emp)

        removed = remove_employee(proj.id, emp.id[:8])
        assert removed.id == emp.id
        assert get_project(proj.id).hr_items == []

    def test_get_employee_by_prefix(self, isolated_env):
        proj = create_project("Plano")
        first = new_employee("Educador", gross_salary=2000).model_copy(update={"id": "abc-1"})
        second = new_employee("Cozinheira", gross_salary=1800).model_copy(update={"id": "abc-2"})
        add_employee(proj.id, first)
        add_employee(proj.id, second)

        assert get_employee(proj.id, "abc-2") == second
        with pytest.raises(ProjectStoreError, match="Ambiguous employee id 'abc'"):
            get_employee(proj.id, "abc")
        with pytest.raises(ProjectNotFoundError, match="No employee matches id 'zzz'"):
            get_employee(proj.id, "zzz")

    def test_remove_missing_item(self, isolated_env):
        proj = create_project("Plano")
        with pytest.raises(ProjectNotFoundError):
            remove_goods_item(proj.id, "nope")

    def test_goods_items(self, isolated_env):
        proj = create_project("Plano")
        item = new_goods_item("Papel A4", "3.3.90.30.16", unit_value=25, quantity=4)
        add_goods_item(proj.id, item)
        assert get_project(proj.id).items == [item]

        cheaper = item.model_copy(update={"unit_value": 20})
        replace_goods_items(proj.id, [cheaper])
        assert get_project(proj.id).items[0].unit_value == 20

        remove_goods_item(proj.id, item.id)
        assert get_project(proj.id).items == []

    def test_last_modified_bumped(self, isolated_env):
        proj = create_project("Plano")
        before = get_project(proj.id).last_modified
        add_goods_item(proj.id, new_goods_item("Café", "3.3.90.30.07", unit_value=18))
        assert get_project(proj.id).last_modified >= before


def test_project_summary(isolated_env):
    proj = create_project("Plano")
    emp = new_employee("Educador", gross_salary=2000)
    add_employee(proj.id, emp)
    add_goods_item(proj.id, new_goods_item("Café", "3.3.90.30.07", unit_value=18, quantity=2, frequency=12))

    summary = project_summary(get_project(proj.id), DEFAULT_RATE_TABLE)
    expected_hr = compute_cost(emp, DEFAULT_RATE_TABLE).annual_total
    assert summary.goods_total == pytest.approx(432)
    assert summary.hr_total == pytest.approx(expected_hr)
    assert summary.grand_total == pytest.approx(432 + expected_hr)
    assert (summary.goods_count, summary.hr_count) == (1, 1)
