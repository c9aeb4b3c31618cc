# Routes package init
"""
Toolhub Backend — API Routes Package
======================================

What:  HTTP route handlers. Routes stay thin: extract input, call a service,
       shape the response. Business rules live in toolhub.services.

Route Inventory:
    Public
    - tools.py:           GET  /api/tools, GET /api/tools/{id}
    - tags.py:            GET  /api/tags
    - requests.py:        POST /api/requests          (rate limited)
    - health.py:          GET  /health

    Admin (X-Admin-Key required)
    - admin_requests.py:  /api/admin/requests[/{id}]  review queue, approve/deny
    - admin_tools.py:     /api/admin/tools[/{id}]
    - admin_tags.py:      /api/admin/tags[/{id}]
    - admin_users.py:     /api/admin/users[/{id}]
"""
