"""Tests for the payroll cost calculator.

Covers the formula cross-terms (PIS on provisions, severance fine on all
FGTS deposits), the default-table golden breakdown, and that changing a
single rate only moves the fields that depend on it.
"""

import pytest

from scfvplan.sdk.payroll import (
    BREAKDOWN_FIELDS,
    DEFAULT_RATE_TABLE,
    RATE_FIELDS,
    EmployeeRecord,
    column_totals,
    compute_cost,
    compute_costs,
    steps_depending_on,
    total_annual_cost,
)


def make_employee(gross_salary=2000.0, quantity=1, months=12, benefits=0.0, **overrides):
    fields = dict(
        id="emp-1",
        role="Orientador Social",
        education="Ensino Médio",
        weekly_hours=40,
        monthly_hours=200,
        quantity=quantity,
        gross_salary=gross_salary,
        months=months,
        benefits=benefits,
    )
    fields.update(overrides)
    return EmployeeRecord(**fields)


# Golden breakdown for gross 2000, quantity 1, no benefits, default table.
GOLDEN_2000 = {
    "base": 2000.0,
    "fgts": 160.0,
    "inss": 400.0,
    "one_third_vacation_provision": 55.5555555555556,
    "fgts_on_vacation_provision": 4.44444444444444,
    "inss_on_vacation_provision": 16.2777777777778,
    "thirteenth_salary_provision": 166.666666666667,
    "fgts_on_thirteenth": 13.3333333333333,
    "inss_on_thirteenth": 48.8333333333333,
    "pis": 22.2222222222222,
    "benefits_total": 0.0,
    "severance_fine_provision": 71.1111111111111,
    "monthly_total": 2958.44444444444,
    "annual_total": 35501.3333333333,
}


class TestComputeCost:
    """Single-record breakdowns."""

    def test_base_equals_salary_for_single_person(self):
        cost = compute_cost(make_employee(gross_salary=3123.45), DEFAULT_RATE_TABLE)
        assert cost.base == 3123.45

    def test_base_scales_with_quantity(self):
        cost = compute_cost(make_employee(gross_salary=1500, quantity=3), DEFAULT_RATE_TABLE)
        assert cost.base == 4500

    def test_pis_includes_both_provisions(self):
        cost = compute_cost(make_employee(gross_salary=2750), DEFAULT_RATE_TABLE)
        expected = (
            cost.base + cost.one_third_vacation_provision + cost.thirteenth_salary_provision
        ) * DEFAULT_RATE_TABLE.pis_rate
        assert cost.pis == pytest.approx(expected, rel=1e-12)
        # Not just payroll
        assert cost.pis != pytest.approx(cost.base * DEFAULT_RATE_TABLE.pis_rate)

    def test_severance_fine_on_all_fgts_deposits(self):
        cost = compute_cost(make_employee(gross_salary=2750), DEFAULT_RATE_TABLE)
        expected = (
            cost.fgts + cost.fgts_on_vacation_provision + cost.fgts_on_thirteenth
        ) * DEFAULT_RATE_TABLE.multa_fgts_rate
        assert cost.severance_fine_provision == pytest.approx(expected, rel=1e-12)

    def test_provisions_use_provision_inss_rate(self):
        rates = DEFAULT_RATE_TABLE.replace(employer_inss_rate=0.5)
        cost = compute_cost(make_employee(), rates)
        assert cost.inss == pytest.approx(1000)
        assert cost.inss_on_thirteenth == pytest.approx(2000 / 12 * 0.293)
        assert cost.inss_on_vacation_provision == pytest.approx(2000 / 36 * 0.293)

    @pytest.mark.parametrize("months", range(1, 13))
    def test_annual_is_monthly_times_months(self, months):
        cost = compute_cost(make_employee(months=months), DEFAULT_RATE_TABLE)
        assert cost.annual_total == cost.monthly_total * months

    def test_monthly_total_sums_components(self):
        cost = compute_cost(make_employee(benefits=310.5, quantity=2), DEFAULT_RATE_TABLE)
        components = [getattr(cost, f) for f in BREAKDOWN_FIELDS[:-2]]
        assert cost.monthly_total == pytest.approx(sum(components), rel=1e-12)

    def test_benefits_multiplied_by_quantity(self):
        cost = compute_cost(make_employee(benefits=250, quantity=4), DEFAULT_RATE_TABLE)
        assert cost.benefits_total == 1000

    def test_missing_benefits_count_as_zero(self):
        cost = compute_cost(make_employee(benefits=None), DEFAULT_RATE_TABLE)
        assert cost.benefits_total == 0

    def test_benefits_not_subject_to_charges(self):
        without = compute_cost(make_employee(benefits=0), DEFAULT_RATE_TABLE)
        with_benefits = compute_cost(make_employee(benefits=500), DEFAULT_RATE_TABLE)
        assert with_benefits.fgts == without.fgts
        assert with_benefits.pis == without.pis
        assert with_benefits.monthly_total == pytest.approx(without.monthly_total + 500)

    def test_idempotent(self):
        employee = make_employee(gross_salary=1987.65, quantity=3, benefits=123.4, months=7)
        first = compute_cost(employee, DEFAULT_RATE_TABLE)
        second = compute_cost(employee, DEFAULT_RATE_TABLE)
        assert first.model_dump() == second.model_dump()

    def test_no_validation_in_calculator(self):
        cost = compute_cost(make_employee(gross_salary=-100, months=0), DEFAULT_RATE_TABLE)
        assert cost.base == -100
        assert cost.annual_total == 0


class TestGoldenBreakdown:
    """Default table, gross 2000, one person, twelve months."""

    @pytest.mark.parametrize("field", BREAKDOWN_FIELDS)
    def test_field(self, field):
        cost = compute_cost(make_employee(), DEFAULT_RATE_TABLE)
        assert getattr(cost, field) == pytest.approx(GOLDEN_2000[field], rel=1e-12)

    def test_rounded_display_values(self):
        rounded = compute_cost(make_employee(), DEFAULT_RATE_TABLE).rounded()
        assert rounded["one_third_vacation_provision"] == 55.56
        assert rounded["thirteenth_salary_provision"] == 166.67
        assert rounded["pis"] == 22.22
        assert rounded["severance_fine_provision"] == 71.11
        assert rounded["monthly_total"] == 2958.44
        assert rounded["annual_total"] == 35501.33


class TestRateIsolation:
    """Changing one rate only moves its dependent fields."""

    @pytest.mark.parametrize("rate_name", RATE_FIELDS)
    def test_single_rate_change(self, rate_name):
        employee = make_employee(gross_salary=2345, quantity=2, benefits=100, months=10)
        before = compute_cost(employee, DEFAULT_RATE_TABLE)
        changed = DEFAULT_RATE_TABLE.replace(**{rate_name: getattr(DEFAULT_RATE_TABLE, rate_name) * 1.5})
        after = compute_cost(employee, changed)

        dependents = set(steps_depending_on("rate", rate_name))
        assert dependents
        for field in BREAKDOWN_FIELDS:
            if field in dependents:
                assert getattr(after, field) != getattr(before, field), field
            else:
                assert getattr(after, field) == getattr(before, field), field

    def test_pis_change_leaves_fgts_and_inss(self):
        employee = make_employee()
        before = compute_cost(employee, DEFAULT_RATE_TABLE)
        after = compute_cost(employee, DEFAULT_RATE_TABLE.replace(pis_rate=0.0165))
        assert after.fgts == before.fgts
        assert after.inss == before.inss
        assert after.pis != before.pis


class TestBatch:
    """Totals across several records."""

    def test_base_sum_over_records(self):
        employees = [make_employee(id=f"e{i}", gross_salary=1800) for i in range(5)]
        totals = column_totals(employees, DEFAULT_RATE_TABLE)
        assert totals.base == 5 * 1800

    def test_column_totals_sum_each_field(self):
        employees = [
            make_employee(id="a", gross_salary=2000),
            make_employee(id="b", gross_salary=3500, quantity=2, benefits=200, months=6),
        ]
        rows = compute_costs(employees, DEFAULT_RATE_TABLE)
        totals = column_totals(employees, DEFAULT_RATE_TABLE)
        for field in BREAKDOWN_FIELDS:
            expected = sum(getattr(cost, field) for _, cost in rows)
            assert getattr(totals, field) == pytest.approx(expected)

    def test_total_annual_cost(self):
        employees = [make_employee(id="a"), make_employee(id="b", months=6)]
        assert total_annual_cost(employees, DEFAULT_RATE_TABLE) == pytest.approx(
            GOLDEN_2000["monthly_total"] * 18
        )

    def test_empty_batch(self):
        assert column_totals([], DEFAULT_RATE_TABLE).annual_total == 0
        assert total_annual_cost([], DEFAULT_RATE_TABLE) == 0
