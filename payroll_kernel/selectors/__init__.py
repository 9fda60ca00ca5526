"""Read-only selectors."""

from payroll_kernel.selectors.dashboard_selector import DashboardSelector, DashboardStats

__all__ = ["DashboardSelector", "DashboardStats"]
