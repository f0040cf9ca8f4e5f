# Services package init
"""
SnipShelf Backend — Services Layer
====================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services receive the request's session and the authenticated user,
       call the auth guard before touching a row, and return response schemas.

Service Inventory:
    - CollectionService: create / update / list collections, default-collection rule
    - SnippetService: create / update (incl. move) / archive / list / get snippets

Both are stateless; routes use the module-level singletons.
"""
