"""
BottleNet Backend: Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: Accept a well-formed client correlation ID or mint one
    2. Logging: One access line per request, tagged with the message id
       for /api/messages/{id}/... routes
    3. GZip: Compresses responses of 500 bytes or more
    4. CORS: Applied by FastAPI's CORSMiddleware
"""
