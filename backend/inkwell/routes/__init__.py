# Routes package init
"""
Inkwell Backend: API Routes Package
=====================================

Route Inventory:
    - auth.py:    POST /register, POST /login, GET /profile, POST /logout
    - posts.py:   POST/GET /post, GET/PUT/DELETE /post/{id}
    - health.py:  GET /health

Routes stay thin: they read cookies, forms and files, call a service, and
return its response model. Errors are raised as InkwellError subclasses and
formatted by the handlers in main.py.
"""
