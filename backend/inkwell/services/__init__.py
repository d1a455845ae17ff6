# Services package init
"""
Inkwell Backend — Services Layer
=================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Stateless service classes with one module-level instance each. Every
       method takes the request's AsyncSession, so a status change and its
       audit entry always share one transaction.

Service Inventory:
    - workflow:                transition tables + guarded single-row update
    - AuditService:            append-only audit trail
    - ArticleService:          public listing/detail, submit for review, reading time
    - ModerationService:       admin approve / reject / unpublish
    - ApplicationService:      author applications and their review
    - PreferencesService:      reader preferences
    - ReadingHistoryService:   per-article reading progress
    - SEOService:              article metadata, sitemap, robots
    - i18n:                    locale negotiation and message catalogue
"""
