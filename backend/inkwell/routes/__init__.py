# Routes package init
"""
Inkwell Backend — API Routes Package
=====================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - articles.py:            GET  /api/articles, GET /api/articles/{slug},
                              POST /api/articles/draft, GET /api/author/articles,
                              POST /api/articles/{id}/submit
    - moderation.py:          /api/admin/moderation/*            (admin)
    - author_applications.py: /api/author-application,
                              /api/admin/author-applications/*   (admin)
    - preferences.py:         GET/PATCH /api/preferences
    - reading_history.py:     /api/articles/{id}/reading-history, /api/reading-history
    - audit.py:               GET  /api/admin/audit-logs          (admin)
    - user_admin.py:          /api/admin/users/*                 (admin)
    - seo.py:                 /api/articles/{slug}/metadata, /sitemap.xml, /robots.txt
    - health.py:              GET/HEAD /api/health

Design Principle:
    Routes are THIN. They extract data from the request, call a service,
    and wrap the result in {"success": true, "data": ...} with the right
    status code and headers. Business rules live in services.
"""
