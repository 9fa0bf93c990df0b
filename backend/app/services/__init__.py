# Services package init
"""
Daylog Backend — Services Layer
=================================

What:  Business rules between the routes (HTTP) and the database.
How:   Each service is a module-level singleton. Its methods take the
       request's AsyncSession and the caller's user id explicitly and
       return response schemas.

Service Inventory:
    - IdentityService: token → user id, provisioning users on first sight
    - NoteService:     notes CRUD with paging, search and sort
    - HabitService:    habits and daily check-in streaks
    - DiaryService:    one entry per user per calendar day (upsert)
    - FileService:     image upload validation, storage and lookup
"""
