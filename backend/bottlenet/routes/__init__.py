# Routes package init
"""
BottleNet Backend: API Routes Package
=======================================

Route Inventory:
    - hello.py:     GET  /api/hello
    - users.py:     POST /api/users, GET /api/users
    - messages.py:  POST /api/messages/new
                    POST /api/messages/{id}/respond
                    POST /api/messages/{id}/drop
                    GET  /api/messages/{id}/keep?userId=...
    - health.py:    GET  /health

Routes stay thin: extract ids and bodies, call a service, return a schema.
Routing and threading rules belong in services/message_service.py.
"""
