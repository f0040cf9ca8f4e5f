# Routes package init
"""
SnipShelf Backend — Action Routes Package
===========================================

Route Inventory (all POST with a JSON body, envelope {success, data}):
    - collections.py: /_actions/createSnippetCollection
                      /_actions/updateSnippetCollection
                      /_actions/listMySnippetCollections
    - snippets.py:    /_actions/createSnippet
                      /_actions/updateSnippet
                      /_actions/archiveSnippet
                      /_actions/listSnippets
                      /_actions/getSnippet
    - health.py:      GET /health

Design Principle:
    Routes are THIN. They declare the input shape, resolve the caller with
    require_user and hand both to a service. Ownership and persistence live
    in the services.
"""

from snipshelf.schemas.common import ErrorResponse

ACTIONS_PREFIX = "/_actions"

# Error responses every action can produce (OpenAPI docs)
ACTION_ERROR_RESPONSES = {
    400: {"description": "Input failed validation (BAD_REQUEST)", "model": ErrorResponse},
    401: {"description": "No authenticated user (UNAUTHORIZED)", "model": ErrorResponse},
    404: {"description": "Missing or not yours (NOT_FOUND)", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
