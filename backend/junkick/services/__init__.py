# Services package init
"""
Junkick Backend — Services Layer
==================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
Why:   Routes handle HTTP; services own ownership, capacity and identity rules.
How:   Services accept a session, validated request models and the caller,
       apply the rules, and return response models.

Service Inventory:
    - access_control: Pure authorization evaluator (no I/O)
    - identifiers: Reference / legacy id parsing and owner resolution
    - security: Password hashing and JWT access tokens
    - ProjectService: Project CRUD, team membership, filtered listing
    - ApplicationService: Application create, listing and status changes
    - AuthService / UserService: Accounts, login sessions and profiles
    - DictionaryService: Roles, technologies and categories
"""
