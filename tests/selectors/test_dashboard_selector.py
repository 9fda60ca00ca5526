"""Tests for DashboardSelector.stats()."""

from decimal import Decimal

from payroll_kernel.domain.dtos import EmployeeStatus


def test_empty_store(dashboard):
    stats = dashboard.stats(3, 2024)
    assert stats.total_employees == 0
    assert stats.total_monthly_salary == Decimal("0")
    assert stats.employees_by_department == {}


def test_headline_figures(make_employee, make_advance, salary_service, dashboard):
    a = make_employee(department="Informatique")
    b = make_employee(department="Informatique", bonus="0")
    make_employee(department="Direction")
    make_employee(department="Direction", status=EmployeeStatus.INACTIVE)

    make_advance(a.id, amount=Decimal("10000"))
    make_advance(b.id, amount=Decimal("15000"))
    make_advance(b.id, amount=Decimal("20000"), approve=True)

    pa = salary_service.compute_monthly_salary(a.id, 3, 2024)
    salary_service.compute_monthly_salary(b.id, 3, 2024)
    salary_service.compute_monthly_salary(a.id, 4, 2024)
    salary_service.record_payment(pa.id, 100000)

    stats = dashboard.stats(3, 2024)

    assert stats.total_employees == 4
    assert stats.active_employees == 3
    # 275000 + 225000 + 275000
    assert stats.total_monthly_salary == Decimal("775000")
    assert stats.pending_advances == 2
    assert stats.pending_advances_amount == Decimal("25000")
    assert stats.paid_this_month == Decimal("100000")
    # a: 275000 - 100000, b: 225000 - 20000
    assert stats.remaining_to_pay == Decimal("380000")
    assert stats.employees_by_department == {"Informatique": 2, "Direction": 1}
