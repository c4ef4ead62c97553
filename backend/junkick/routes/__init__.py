# Routes package init
"""
Junkick Backend — API Routes Package
======================================

What:  HTTP route handlers. All of them are mounted under `settings.api_prefix`
       (default `/api`) except health.

Route Inventory:
    - auth.py:          /auth/register, /auth/login, /auth/logout, /auth/me
    - users.py:         /users/{id}
    - projects.py:      /projects, /projects/owner/{ownerId}, /projects/{id},
                        /projects/{id}/team, /projects/{id}/team/{userId}
    - applications.py:  /applications, /applications/projects/{id},
                        /applications/{id}
    - dictionaries.py:  /roles, /technologies, /categories
    - health.py:        /health (root level)

Routes are thin: extract input, resolve the caller (deps.py), call a
service, return its response model. Business rules live in services.
"""
