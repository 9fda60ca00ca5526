"""Tests for ReferenceDataService: departments and positions."""

import pytest

from payroll_kernel.exceptions import (
    DepartmentNotFoundError,
    DuplicateDepartmentError,
    FormValidationError,
)


class TestDepartments:
    def test_add_and_list_sorted(self, reference_service):
        reference_service.add_department("Production")
        reference_service.add_department("Comptabilité", description="Finances")
        names = [d.name for d in reference_service.list_departments()]
        assert names == ["Comptabilité", "Production"]

    def test_duplicate_name(self, reference_service):
        reference_service.add_department("Direction")
        with pytest.raises(DuplicateDepartmentError):
            reference_service.add_department(" Direction ")

    def test_blank_name(self, reference_service):
        with pytest.raises(FormValidationError):
            reference_service.add_department("   ")

    def test_rename_to_taken_name(self, reference_service):
        reference_service.add_department("Direction")
        marketing = reference_service.add_department("Marketing")
        with pytest.raises(DuplicateDepartmentError):
            reference_service.update_department(marketing.id, "Direction")

    def test_rename_keeping_own_name(self, reference_service):
        marketing = reference_service.add_department("Marketing")
        updated = reference_service.update_department(marketing.id, "Marketing", "Com & pub")
        assert updated.description == "Com & pub"

    def test_rename_moves_scoped_positions(self, reference_service):
        it = reference_service.add_department("Informatique")
        reference_service.add_position("Développeur", department="Informatique")
        reference_service.update_department(it.id, "Systèmes d'information")

        assert reference_service.list_positions("Informatique") == []
        assert [p.name for p in reference_service.list_positions("Systèmes d'information")] == [
            "Développeur"
        ]

    def test_delete_cascades_to_positions(self, reference_service):
        it = reference_service.add_department("Informatique")
        reference_service.add_position("Développeur", department="Informatique")
        reference_service.add_position("Technicien", department="Informatique")
        reference_service.add_position("Agent")

        assert reference_service.delete_department(it.id) == 2
        assert [p.name for p in reference_service.list_positions()] == ["Agent"]

    def test_delete_unknown_is_noop(self, reference_service):
        assert reference_service.delete_department("ghost") == 0

    def test_seed_skips_existing(self, reference_service):
        reference_service.add_department("Direction")
        added = reference_service.seed_departments(["Direction", "Autre"])
        assert [d.name for d in added] == ["Autre"]


class TestPositions:
    def test_position_requires_known_department(self, reference_service):
        with pytest.raises(DepartmentNotFoundError):
            reference_service.add_position("Comptable", department="Finances")

    def test_unscoped_position(self, reference_service):
        position = reference_service.add_position("Stagiaire")
        assert position.department is None

    def test_update_and_delete(self, reference_service):
        reference_service.add_department("Logistique")
        position = reference_service.add_position("Magasinier")
        moved = reference_service.update_position(position.id, "Magasinier", department="Logistique")
        assert moved.department == "Logistique"
        assert reference_service.delete_position(position.id) is True
        assert reference_service.delete_position(position.id) is False
