# tests/test_assignments.py

"""
Tests for staff assignments and the project delete cascade.
"""

import pytest

from core.collections import COLLECTION_STAFF_ASSIGNMENTS
from core.errors import InvalidReference, NotFound, StoreUnavailable
from models.assignment import AssignmentUpdate, assignment_key
from models.enums import AssignmentStatus, Role
from services.assignments import AssignmentManager


@pytest.fixture
def client_id(make_user):
    return make_user("owner@clinic.com", Role.CLIENT)


@pytest.fixture
def staff_ids(make_user):
    return [
        make_user("s1@lucidence.io", Role.STAFF),
        make_user("s2@lucidence.io", Role.STAFF),
    ]


@pytest.fixture
def project_id(projects, client_id):
    return projects.create_client_project(client_id, "Owner Clinic Project")


def test_assign_twice_keeps_one_record_with_latest_notes(assignments, store, staff_ids, project_id):
    staff = staff_ids[0]

    first = assignments.assign_staff_to_project(staff, project_id, "first pass")
    second = assignments.assign_staff_to_project(staff, project_id, "second pass")

    records = store.all(COLLECTION_STAFF_ASSIGNMENTS)
    assert len(records) == 1
    assert records[0]["id"] == assignment_key(staff, project_id)
    assert second.notes == "second pass"
    assert second.assigned_at >= first.assigned_at
    assert second.assignment_status == AssignmentStatus.active


def test_reassign_reactivates_inactive_assignment(assignments, staff_ids, project_id):
    staff = staff_ids[0]
    assignments.assign_staff_to_project(staff, project_id)
    assignments.update_staff_assignment(
        staff, project_id, AssignmentUpdate(assignment_status=AssignmentStatus.inactive)
    )

    again = assignments.assign_staff_to_project(staff, project_id)
    assert again.assignment_status == AssignmentStatus.active


def test_only_staff_can_be_assigned(assignments, client_id, project_id):
    with pytest.raises(InvalidReference):
        assignments.assign_staff_to_project(client_id, project_id)


def test_assignment_to_missing_project(assignments, staff_ids):
    with pytest.raises(NotFound):
        assignments.assign_staff_to_project(staff_ids[0], "missing-project")


def test_update_missing_assignment_is_not_found(assignments, staff_ids, project_id):
    with pytest.raises(NotFound):
        assignments.update_staff_assignment(staff_ids[0], project_id, AssignmentUpdate(notes="x"))


def test_update_changes_notes_only(assignments, staff_ids, project_id):
    assignments.assign_staff_to_project(staff_ids[0], project_id, "original")

    updated = assignments.update_staff_assignment(staff_ids[0], project_id, AssignmentUpdate(notes="edited"))
    assert updated.notes == "edited"
    assert updated.assignment_status == AssignmentStatus.active


def test_remove_twice_is_fine(assignments, staff_ids, project_id):
    assignments.assign_staff_to_project(staff_ids[0], project_id)

    assignments.remove_staff_assignment(staff_ids[0], project_id)
    assignments.remove_staff_assignment(staff_ids[0], project_id)

    assert assignments.get_assignment(staff_ids[0], project_id) is None


def test_lookups_by_project_and_staff(assignments, projects, client_id, staff_ids, project_id):
    other_project = projects.create_client_project(client_id, "Second Project")
    assignments.assign_staff_to_project(staff_ids[0], project_id)
    assignments.assign_staff_to_project(staff_ids[1], project_id)
    assignments.assign_staff_to_project(staff_ids[0], other_project)

    assert {a.staff_id for a in assignments.get_assignments_by_project(project_id)} == set(staff_ids)
    assert {a.client_project_id for a in assignments.get_assignments_by_staff(staff_ids[0])} == {
        project_id,
        other_project,
    }


# -----------------------------------------------------
# Project delete cascade
# -----------------------------------------------------
def test_delete_project_removes_its_assignments(assignments, projects, staff_ids, project_id):
    s1, s2 = staff_ids
    assignments.assign_staff_to_project(s1, project_id)
    assignments.assign_staff_to_project(s2, project_id)

    assignments.delete_client_project(project_id)

    assert assignments.get_assignment(s1, project_id) is None
    assert assignments.get_assignment(s2, project_id) is None
    assert projects.get_client_project_by_id(project_id) is None


def test_delete_project_keeps_other_projects_assignments(assignments, projects, client_id, staff_ids, project_id):
    other_project = projects.create_client_project(client_id, "Second Project")
    assignments.assign_staff_to_project(staff_ids[0], project_id)
    assignments.assign_staff_to_project(staff_ids[0], other_project)

    assignments.delete_client_project(project_id)

    assert assignments.get_assignment(staff_ids[0], other_project) is not None


def test_enumeration_failure_keeps_project(assignments, projects, store, staff_ids, project_id):
    assignments.assign_staff_to_project(staff_ids[0], project_id)
    store.fail("query", COLLECTION_STAFF_ASSIGNMENTS)

    with pytest.raises(StoreUnavailable):
        assignments.delete_client_project(project_id)

    assert projects.get_client_project_by_id(project_id) is not None
    assert assignments.get_assignment(staff_ids[0], project_id) is not None


def test_failed_removal_aborts_project_delete(assignments, projects, store, staff_ids, project_id):
    s1, s2 = staff_ids
    assignments.assign_staff_to_project(s1, project_id)
    assignments.assign_staff_to_project(s2, project_id)
    store.fail("delete", COLLECTION_STAFF_ASSIGNMENTS, doc_id=assignment_key(s2, project_id))

    with pytest.raises(StoreUnavailable):
        assignments.delete_client_project(project_id)

    assert projects.get_client_project_by_id(project_id) is not None
    assert assignments.get_assignment(s2, project_id) is not None


def test_removal_retries_absorb_transient_failures(store, users, projects, staff_ids, project_id):
    manager = AssignmentManager(store, users, projects, removal_retries=2)
    manager.assign_staff_to_project(staff_ids[0], project_id)
    store.fail("delete", COLLECTION_STAFF_ASSIGNMENTS, times=2)

    manager.delete_client_project(project_id)

    assert projects.get_client_project_by_id(project_id) is None
    assert manager.get_assignment(staff_ids[0], project_id) is None


def test_delete_missing_project_is_not_found(assignments):
    with pytest.raises(NotFound):
        assignments.delete_client_project("missing-project")
