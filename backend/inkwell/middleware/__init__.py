# Middleware package init
"""
Inkwell Backend — Middleware Package
=====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Rate Limit] → [Logging] → [GZip] → Route Handler

    1. CORS outermost: even 429 responses carry the CORS headers
    2. Request ID: assigned before anything can fail, echoed on every response
    3. Rate Limit: rejects abusive clients before any handler work
    4. Logging: records status and duration of requests that got through

Exempt paths:
    /api/health is neither rate limited nor access-logged; the docs and the
    SEO files (/sitemap.xml, /robots.txt) are not rate limited.
"""
