# Routes package init
"""
Daylog Backend — API Routes Package
=====================================

What:  HTTP route handlers that accept requests and return responses.
How:   One module per resource; handlers stay thin and delegate to services.

Route Inventory:
    - notes.py:    /api/notes            (list, get, create, replace, patch, delete)
    - habits.py:   /api/habits           (list, create, POST /{id}/checkin)
    - diaries.py:  /api/diaries          (list, per-day upsert)
    - uploads.py:  POST /api/upload, GET /uploads/{path}
    - health.py:   GET /, GET /health

Every /api route resolves the caller through get_current_user_id before
touching any service.
"""
