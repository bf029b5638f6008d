"""Document store collection names.

Use these constants so collection names stay consistent across services,
routers and health checks. Each collection is a Supabase table keyed by
a text `id` column.
"""

COLLECTION_USERS = "users"
COLLECTION_LEADS = "leads"
COLLECTION_CLIENT_PROJECTS = "client_projects"
COLLECTION_STAFF_ASSIGNMENTS = "staff_client_projects"

ALL_COLLECTIONS = (
    COLLECTION_USERS,
    COLLECTION_LEADS,
    COLLECTION_CLIENT_PROJECTS,
    COLLECTION_STAFF_ASSIGNMENTS,
)
