# services/assignments.py

from typing import List, Optional

from core.collections import COLLECTION_CLIENT_PROJECTS, COLLECTION_STAFF_ASSIGNMENTS
from core.document_store import SERVER_TIMESTAMP, DocumentStore
from core.errors import AppError, InvalidReference, NotFound, StoreUnavailable
from core.logging_config import logger
from models.assignment import AssignmentUpdate, StaffAssignment, assignment_key
from models.enums import AssignmentStatus, Role
from services.projects import ProjectService
from services.users import UserService


def assignment_from_document(doc: dict) -> StaffAssignment:
    return StaffAssignment.model_validate(doc)


class AssignmentManager:
    """
    Staff ↔ client project relation, keyed by (staff_id, client_project_id).

    Writes are last-writer-wins upserts on the composite key. Deleting a
    project removes every assignment that points at it first, and leaves
    the project in place if any removal still fails after
    `removal_retries` extra attempts.
    """

    def __init__(
        self,
        store: DocumentStore,
        users: UserService,
        projects: ProjectService,
        removal_retries: int = 0,
    ):
        self.store = store
        self.users = users
        self.projects = projects
        self.removal_retries = removal_retries

    # ----------------------------------------------------------
    # Reads
    # ----------------------------------------------------------
    def get_assignment(self, staff_id: str, project_id: str) -> Optional[StaffAssignment]:
        doc = self.store.get(COLLECTION_STAFF_ASSIGNMENTS, assignment_key(staff_id, project_id))
        return assignment_from_document(doc) if doc else None

    def get_assignments_by_project(self, project_id: str) -> List[StaffAssignment]:
        docs = self.store.query(COLLECTION_STAFF_ASSIGNMENTS, {"client_project_id": project_id})
        return [assignment_from_document(d) for d in docs]

    def get_assignments_by_staff(self, staff_id: str) -> List[StaffAssignment]:
        docs = self.store.query(COLLECTION_STAFF_ASSIGNMENTS, {"staff_id": staff_id})
        return [assignment_from_document(d) for d in docs]

    # ----------------------------------------------------------
    # Writes
    # ----------------------------------------------------------
    def assign_staff_to_project(self, staff_id: str, project_id: str, notes: Optional[str] = None) -> StaffAssignment:
        """Upsert: an existing pair is overwritten, never duplicated."""
        staff = self.users.require_user(staff_id)
        if staff.role != Role.STAFF:
            raise InvalidReference(f"User {staff_id} is {staff.role}, not {Role.STAFF}")
        self.projects.require_project(project_id)

        self.store.set(
            COLLECTION_STAFF_ASSIGNMENTS,
            assignment_key(staff_id, project_id),
            {
                "staff_id": staff_id,
                "client_project_id": project_id,
                "assignment_status": AssignmentStatus.active.value,
                "notes": notes or "",
                "assigned_at": SERVER_TIMESTAMP,
            },
        )
        logger.info(f"Assigned staff {staff_id} to project {project_id}")
        return self.get_assignment(staff_id, project_id)

    def update_staff_assignment(self, staff_id: str, project_id: str, updates: AssignmentUpdate) -> StaffAssignment:
        fields = updates.model_dump(exclude_none=True, mode="json")
        key = assignment_key(staff_id, project_id)
        try:
            if fields:
                self.store.update(COLLECTION_STAFF_ASSIGNMENTS, key, fields)
            current = self.get_assignment(staff_id, project_id)
        except NotFound:
            current = None
        if current is None:
            raise NotFound("Assignment", key)
        return current

    def remove_staff_assignment(self, staff_id: str, project_id: str):
        """Removing an assignment that does not exist succeeds."""
        self.store.delete(COLLECTION_STAFF_ASSIGNMENTS, assignment_key(staff_id, project_id))

    # ----------------------------------------------------------
    # Project delete with cascade
    # ----------------------------------------------------------
    def _remove_with_retries(self, assignment: StaffAssignment) -> Optional[AppError]:
        attempts = 1 + self.removal_retries
        for attempt in range(1, attempts + 1):
            try:
                self.remove_staff_assignment(assignment.staff_id, assignment.client_project_id)
                return None
            except StoreUnavailable as e:
                logger.warning(
                    f"Removing assignment {assignment.key} failed (attempt {attempt}/{attempts}): {e.message}"
                )
                error = e
        return error

    def delete_client_project(self, project_id: str):
        self.projects.require_project(project_id)

        # Enumeration failure propagates: nothing has been deleted yet
        assignments = self.get_assignments_by_project(project_id)

        for assignment in assignments:
            error = self._remove_with_retries(assignment)
            if error is not None:
                logger.error(f"Aborting delete of project {project_id}: assignment {assignment.key} remains")
                raise StoreUnavailable(
                    f"Project {project_id} was not deleted: could not remove assignment {assignment.key}"
                )

        self.store.delete(COLLECTION_CLIENT_PROJECTS, project_id)
        logger.info(f"Deleted project {project_id} and {len(assignments)} assignment(s)")
