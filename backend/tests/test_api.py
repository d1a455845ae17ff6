"""
Inkwell Backend — HTTP API Tests
=================================

What:  End-to-end tests through the ASGI app (middleware, auth dependencies,
       exception handlers, envelopes and headers).

What we test:
    ✅ Health check (GET and HEAD)
    ✅ Error envelope for 400 / 401 / 403 / 404 / 409
    ✅ Admin-only routes refuse readers and authors
    ✅ Moderation and author-application flows over HTTP
    ✅ Caching and request-id headers
    ✅ Reading history, preferences, SEO files
    ✅ Rate limiting, and X-Forwarded-For only from trusted proxies
    ✅ Draft authoring and the author's own article list
    ✅ Admin user management (roles, deactivation)
"""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from inkwell.config import settings
from inkwell.models.audit_log import AuditLog
from inkwell.models.user_profile import UserProfile

APPLICATION_BODY = {
    "bio": "I have practised and taught meditation for fifteen years. " * 3,
    "credentials": "Certified instructor, retreat leader, published essayist.",
    "motivation": "I would like to share practical guidance with new practitioners. " * 2,
}


def assert_error(response, status, code):
    body = response.json()
    assert response.status_code == status
    assert body["success"] is False
    assert body["code"] == code
    assert body["message"]
    assert "request_id" in body
    return body


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"] == {"api": True, "database": True, "environment": True}
        assert response.headers["cache-control"] == "no-store"

    @pytest.mark.asyncio
    async def test_health_head(self, client):
        response = await client.head("/api/health")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_secret_is_degraded(self, client, monkeypatch):
        monkeypatch.setattr(settings, "jwt_secret", "")

        response = await client.get("/api/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["environment"] is False
        assert any("JWT_SECRET" in e for e in body["errors"])


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, client):
        response = await client.get("/robots.txt")
        assert len(response.headers["x-request-id"]) == 8

    @pytest.mark.asyncio
    async def test_client_value_echoed_in_header_and_error_body(self, client):
        response = await client.get("/api/preferences", headers={"X-Request-ID": "trace-123"})

        assert response.headers["x-request-id"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"


class TestAuthErrors:

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.get("/api/preferences")

        assert_error(response, 401, "UNAUTHORIZED")
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_expired_token(self, client, reader, make_token):
        token = make_token(reader, expires_in=-60)

        response = await client.get(
            "/api/preferences", headers={"Authorization": f"Bearer {token}"}
        )

        body = assert_error(response, 401, "UNAUTHORIZED")
        assert body["message"] == "Authentication token has expired"

    @pytest.mark.parametrize(
        "method, path",
        [
            ("GET", "/api/admin/moderation/pending"),
            ("GET", "/api/admin/moderation/published"),
            ("POST", f"/api/admin/moderation/{uuid.uuid4()}/approve"),
            ("POST", f"/api/admin/moderation/{uuid.uuid4()}/reject"),
            ("POST", f"/api/admin/moderation/{uuid.uuid4()}/unpublish"),
            ("GET", "/api/admin/author-applications"),
            ("GET", "/api/admin/audit-logs"),
            ("GET", "/api/admin/users"),
        ],
    )
    @pytest.mark.asyncio
    async def test_admin_routes_refuse_authors(
        self, client, author, auth_headers, method, path
    ):
        response = await client.request(method, path, headers=auth_headers(author))

        body = assert_error(response, 403, "FORBIDDEN")
        assert body["details"]["role"] == "author"

    @pytest.mark.asyncio
    async def test_admin_routes_require_authentication(self, client):
        response = await client.get("/api/admin/moderation/pending")
        assert_error(response, 401, "UNAUTHORIZED")


class TestArticlesApi:

    @pytest.mark.asyncio
    async def test_public_listing_is_cacheable(self, client, author, make_article):
        await make_article(author, status="published")
        await make_article(author, status="draft")

        response = await client.get("/api/articles")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["total"] == 1
        assert "content" not in body["data"]["articles"][0]
        assert response.headers["x-total-count"] == "1"
        assert response.headers["cache-control"].startswith("public, s-maxage=")

    @pytest.mark.asyncio
    async def test_draft_listing_requires_admin(self, client, reader, admin, auth_headers):
        response = await client.get("/api/articles?status=draft", headers=auth_headers(reader))
        assert_error(response, 403, "FORBIDDEN")

        response = await client.get("/api/articles?status=draft", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"

    @pytest.mark.asyncio
    async def test_unknown_status_is_400(self, client):
        response = await client.get("/api/articles?status=bogus")
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_out_of_range_limit_is_400(self, client):
        response = await client.get("/api/articles?limit=1000")
        body = assert_error(response, 400, "VALIDATION_ERROR")
        assert body["details"]["errors"]

    @pytest.mark.asyncio
    async def test_article_detail(self, client, author, make_article):
        await make_article(author, status="published", slug="calm-mind")

        response = await client.get("/api/articles/calm-mind")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["slug"] == "calm-mind"
        assert data["content"]
        assert data["view_count"] == 1

    @pytest.mark.asyncio
    async def test_unknown_slug_is_404(self, client):
        response = await client.get("/api/articles/nothing-here")
        assert_error(response, 404, "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_author_submits_draft(self, client, author, auth_headers, make_article):
        article = await make_article(author, status="draft")

        response = await client.post(
            f"/api/articles/{article.id}/submit?lang=en", headers=auth_headers(author)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["article"]["status"] == "pending_approval"
        assert data["message"] == "Article submitted for review"


class TestModerationApi:

    @pytest.mark.asyncio
    async def test_pending_queue(self, client, admin, author, auth_headers, make_article):
        article = await make_article(author, status="pending_approval")

        response = await client.get(
            "/api/admin/moderation/pending", headers=auth_headers(admin)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["count"] == 1
        assert data["articles"][0]["id"] == str(article.id)
        assert data["articles"][0]["author"]["username"] == "author"
        assert response.headers["cache-control"] == "no-store"

    @pytest.mark.asyncio
    async def test_approve_then_approve_again(
        self, client, db, admin, author, auth_headers, make_article
    ):
        article = await make_article(author, status="pending_approval")
        url = f"/api/admin/moderation/{article.id}/approve"

        first = await client.post(url, headers=auth_headers(admin))
        second = await client.post(url, headers=auth_headers(admin))

        assert first.status_code == 200
        assert first.json()["data"]["article"]["status"] == "published"
        body = assert_error(second, 409, "INVALID_STATUS_TRANSITION")
        assert body["error"] == "conflict"
        assert body["details"]["current_status"] == "published"

        entries = (await db.execute(select(AuditLog))).scalars().all()
        assert [e.action for e in entries] == ["article_approved"]

    @pytest.mark.asyncio
    async def test_reject_with_reason_in_thai(
        self, client, db, admin, author, auth_headers, make_article
    ):
        article = await make_article(author, status="pending_approval")

        response = await client.post(
            f"/api/admin/moderation/{article.id}/reject",
            json={"reason": "ต้องการแหล่งอ้างอิง"},
            headers={**auth_headers(admin), "Accept-Language": "th-TH,th;q=0.9"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["article"]["status"] == "draft"
        assert data["message"] == "ปฏิเสธบทความและส่งกลับเป็นฉบับร่างแล้ว"
        entry = (await db.execute(select(AuditLog))).scalars().one()
        assert entry.details["rejection_reason"] == "ต้องการแหล่งอ้างอิง"

    @pytest.mark.asyncio
    async def test_unpublish_without_body(
        self, client, admin, author, auth_headers, make_article
    ):
        article = await make_article(author, status="published")

        response = await client.post(
            f"/api/admin/moderation/{article.id}/unpublish?lang=en",
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert response.json()["data"]["article"]["status"] == "archived"
        assert response.json()["data"]["message"] == "Article unpublished successfully"

    @pytest.mark.asyncio
    async def test_unknown_article_is_404(self, client, admin, auth_headers):
        response = await client.post(
            f"/api/admin/moderation/{uuid.uuid4()}/approve", headers=auth_headers(admin)
        )
        assert_error(response, 404, "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client, admin, auth_headers):
        response = await client.post(
            "/api/admin/moderation/not-a-uuid/approve", headers=auth_headers(admin)
        )
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_audit_log_listing(self, client, admin, author, auth_headers, make_article):
        article = await make_article(author, status="pending_approval")
        await client.post(
            f"/api/admin/moderation/{article.id}/approve", headers=auth_headers(admin)
        )

        response = await client.get(
            f"/api/admin/audit-logs?entity_type=article&entity_id={article.id}",
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["count"] == 1
        assert data["entries"][0]["action"] == "article_approved"
        assert data["entries"][0]["actor_id"] == str(admin.user_id)


class TestAuthorApplicationApi:

    @pytest.mark.asyncio
    async def test_full_review_flow(self, client, db, reader, admin, auth_headers):
        submitted = await client.post(
            "/api/author-application", json=APPLICATION_BODY, headers=auth_headers(reader)
        )
        assert submitted.status_code == 201
        application_id = submitted.json()["data"]["id"]

        duplicate = await client.post(
            "/api/author-application", json=APPLICATION_BODY, headers=auth_headers(reader)
        )
        assert_error(duplicate, 409, "APPLICATION_EXISTS")

        listing = await client.get(
            "/api/admin/author-applications?status=pending", headers=auth_headers(admin)
        )
        assert listing.json()["data"]["count"] == 1
        assert listing.json()["data"]["applications"][0]["applicant"]["email"] == reader.email

        review_url = f"/api/admin/author-applications/{application_id}/review?lang=en"
        approved = await client.post(
            review_url, json={"status": "approved"}, headers=auth_headers(admin)
        )
        assert approved.status_code == 200
        data = approved.json()["data"]
        assert data["applicationId"] == application_id
        assert data["status"] == "approved"
        assert data["message"] == "Application approved. Reader is now an author."

        again = await client.post(
            review_url, json={"status": "rejected"}, headers=auth_headers(admin)
        )
        body = assert_error(again, 409, "ALREADY_REVIEWED")
        assert body["message"] == "Application already reviewed"

        profile = await db.scalar(select(UserProfile).where(UserProfile.user_id == reader.user_id))
        await db.refresh(profile)
        assert profile.role == "author"

        mine = await client.get("/api/author-application", headers=auth_headers(reader))
        assert mine.json()["data"]["status"] == "approved"

    @pytest.mark.asyncio
    async def test_short_bio_is_400(self, client, reader, auth_headers):
        response = await client.post(
            "/api/author-application",
            json={**APPLICATION_BODY, "bio": "Too short"},
            headers=auth_headers(reader),
        )
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_no_application_yet(self, client, reader, auth_headers):
        response = await client.get("/api/author-application", headers=auth_headers(reader))
        assert response.status_code == 200
        assert response.json()["data"] is None

    @pytest.mark.asyncio
    async def test_invalid_review_status_is_400(self, client, admin, auth_headers):
        response = await client.post(
            f"/api/admin/author-applications/{uuid.uuid4()}/review",
            json={"status": "withdrawn"},
            headers=auth_headers(admin),
        )
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_unknown_status_filter_is_400(self, client, admin, auth_headers):
        response = await client.get(
            "/api/admin/author-applications?status=withdrawn", headers=auth_headers(admin)
        )
        assert_error(response, 400, "VALIDATION_ERROR")


class TestReaderApi:

    @pytest.mark.asyncio
    async def test_preferences_round_trip(self, client, reader, auth_headers):
        current = await client.get("/api/preferences", headers=auth_headers(reader))
        assert current.json()["data"] == {
            "fontSize": 16,
            "language": "th",
            "accessibilityMode": False,
            "theme": "system",
        }

        updated = await client.patch(
            "/api/preferences", json={"fontSize": 20}, headers=auth_headers(reader)
        )
        assert updated.status_code == 200
        assert updated.json()["data"] == {"reading_font_size": 20}

        current = await client.get("/api/preferences", headers=auth_headers(reader))
        assert current.json()["data"]["fontSize"] == 20

    @pytest.mark.asyncio
    async def test_empty_preferences_update_is_400(self, client, reader, auth_headers):
        response = await client.patch("/api/preferences", json={}, headers=auth_headers(reader))
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_font_size_out_of_range_is_400(self, client, reader, auth_headers):
        response = await client.patch(
            "/api/preferences", json={"fontSize": 40}, headers=auth_headers(reader)
        )
        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_reading_history_flow(self, client, reader, author, auth_headers, make_article):
        article = await make_article(author, status="published")
        url = f"/api/articles/{article.id}/reading-history"

        await client.post(
            url, json={"scroll_percentage": 50, "time_spent_seconds": 40},
            headers=auth_headers(reader),
        )
        merged = await client.post(
            url, json={"scroll_percentage": 30, "time_spent_seconds": 20, "completed": True},
            headers=auth_headers(reader),
        )
        assert merged.status_code == 200
        data = merged.json()["data"]
        assert data["scroll_percentage"] == 50
        assert data["time_spent_seconds"] == 60
        assert data["completed"] is True

        listing = await client.get("/api/reading-history", headers=auth_headers(reader))
        assert listing.json()["data"]["total"] == 1
        assert listing.json()["data"]["history"][0]["article"]["id"] == str(article.id)

        deleted = await client.request(
            "DELETE",
            "/api/reading-history",
            json={"article_id": str(article.id)},
            headers={**auth_headers(reader), "Accept-Language": "en"},
        )
        assert deleted.status_code == 200
        # Saved preference (th) beats Accept-Language
        assert deleted.json()["data"]["message"] == "ลบประวัติการอ่านแล้ว"

        entry = await client.get(url, headers=auth_headers(reader))
        assert entry.json()["data"] is None

    @pytest.mark.asyncio
    async def test_progress_on_draft_is_403(self, client, reader, author, auth_headers, make_article):
        article = await make_article(author, status="draft")

        response = await client.post(
            f"/api/articles/{article.id}/reading-history",
            json={"scroll_percentage": 10},
            headers=auth_headers(reader),
        )

        assert_error(response, 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_scroll_over_100_is_400(self, client, reader, author, auth_headers, make_article):
        article = await make_article(author, status="published")

        response = await client.post(
            f"/api/articles/{article.id}/reading-history",
            json={"scroll_percentage": 150},
            headers=auth_headers(reader),
        )

        assert_error(response, 400, "VALIDATION_ERROR")


class TestSeoApi:

    @pytest.mark.asyncio
    async def test_sitemap(self, client, author, make_article):
        await make_article(author, status="published", slug="calm-mind")

        response = await client.get("/sitemap.xml")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        assert response.headers["cache-control"] == "public, max-age=3600"
        assert b"https://example.test/articles/calm-mind" in response.content

    @pytest.mark.asyncio
    async def test_robots(self, client):
        response = await client.get("/robots.txt")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "Sitemap: https://example.test/sitemap.xml" in response.text

    @pytest.mark.asyncio
    async def test_metadata(self, client, author, make_article):
        await make_article(author, status="published", slug="calm-mind", title="จิตสงบ")

        response = await client.get("/api/articles/calm-mind/metadata")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "จิตสงบ"
        assert data["open_graph"]["locale"] == "th_TH"
        assert data["canonical"] == "https://example.test/articles/calm-mind"


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_requests_over_the_limit_get_429(self, monkeypatch):
        from inkwell.main import create_app

        monkeypatch.setattr(settings, "rate_limit_requests", 2)
        app = create_app()
        transport = ASGITransport(app=app)

        async with AsyncClient(transport=transport, base_url="http://test") as http_client:
            statuses = [
                (await http_client.get("/api/nowhere")).status_code for _ in range(3)
            ]
            limited = await http_client.get("/api/nowhere")
            health = await http_client.get("/robots.txt")

        assert statuses == [404, 404, 429]
        body = assert_error(limited, 429, "RATE_LIMITED")
        assert body["error"] == "rate_limit_exceeded"
        assert int(limited.headers["retry-after"]) > 0
        assert limited.headers["x-request-id"]
        assert health.status_code == 200

    @pytest.mark.asyncio
    async def test_forwarded_for_from_untrusted_peer_is_ignored(self, monkeypatch):
        from inkwell.main import create_app

        monkeypatch.setattr(settings, "rate_limit_requests", 2)
        monkeypatch.setattr(settings, "trusted_proxy_ips", "")
        transport = ASGITransport(app=create_app())

        async with AsyncClient(transport=transport, base_url="http://test") as http_client:
            statuses = [
                (await http_client.get(
                    "/api/nowhere", headers={"X-Forwarded-For": f"10.0.0.{i}"}
                )).status_code
                for i in range(5)
            ]

        assert statuses == [404, 404, 429, 429, 429]

    @pytest.mark.asyncio
    async def test_forwarded_for_from_trusted_proxy_is_the_client(self, monkeypatch):
        from inkwell.main import create_app

        monkeypatch.setattr(settings, "rate_limit_requests", 2)
        # ASGITransport connects as 127.0.0.1
        monkeypatch.setattr(settings, "trusted_proxy_ips", "127.0.0.1")
        transport = ASGITransport(app=create_app())

        async with AsyncClient(transport=transport, base_url="http://test") as http_client:
            first_client = [
                (await http_client.get(
                    "/api/nowhere", headers={"X-Forwarded-For": "198.51.100.7"}
                )).status_code
                for _ in range(3)
            ]
            second_client = await http_client.get(
                "/api/nowhere", headers={"X-Forwarded-For": "198.51.100.8"}
            )

        assert first_client == [404, 404, 429]
        assert second_client.status_code == 404


class TestAuthoringApi:

    @pytest.mark.asyncio
    async def test_draft_lifecycle(self, client, author, auth_headers):
        created = await client.post(
            "/api/articles/draft",
            json={"title": "Walking Meditation", "content": "Step by step. " * 20, "language": "en"},
            headers=auth_headers(author),
        )
        assert created.status_code == 201
        assert created.headers["cache-control"] == "no-store"
        draft = created.json()["data"]
        assert draft["status"] == "draft"
        assert draft["slug"] == "walking-meditation"

        updated = await client.post(
            "/api/articles/draft",
            json={"id": draft["id"], "title": "Walking Meditation", "content": "Revised."},
            headers=auth_headers(author),
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["content"] == "Revised."
        assert updated.json()["data"]["language"] == "en"

        submitted = await client.post(
            f"/api/articles/{draft['id']}/submit", headers=auth_headers(author)
        )
        assert submitted.json()["data"]["article"]["status"] == "pending_approval"

        locked = await client.post(
            "/api/articles/draft",
            json={"id": draft["id"], "title": "Late edit", "content": "Too late."},
            headers=auth_headers(author),
        )
        assert_error(locked, 409, "NOT_A_DRAFT")

        mine = await client.get("/api/author/articles", headers=auth_headers(author))
        assert mine.status_code == 200
        assert mine.json()["data"]["count"] == 1
        assert mine.json()["data"]["articles"][0]["status"] == "pending_approval"

    @pytest.mark.asyncio
    async def test_readers_cannot_write_drafts(self, client, reader, auth_headers):
        response = await client.post(
            "/api/articles/draft",
            json={"title": "Not allowed", "content": "x"},
            headers=auth_headers(reader),
        )
        assert_error(response, 403, "FORBIDDEN")

        response = await client.get("/api/author/articles", headers=auth_headers(reader))
        assert_error(response, 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_only_owner_edits_draft(self, client, author, admin, auth_headers, make_article):
        draft = await make_article(author, status="draft")

        response = await client.post(
            "/api/articles/draft",
            json={"id": str(draft.id), "title": "Hijack", "content": "x"},
            headers=auth_headers(admin),
        )

        assert_error(response, 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_missing_title_is_400(self, client, author, auth_headers):
        response = await client.post(
            "/api/articles/draft", json={"content": "x"}, headers=auth_headers(author)
        )
        assert_error(response, 400, "VALIDATION_ERROR")


class TestUserAdminApi:

    @pytest.mark.asyncio
    async def test_list_users(self, client, reader, author, admin, auth_headers):
        response = await client.get(
            "/api/admin/users?role=reader", headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"
        data = response.json()["data"]
        assert [u["id"] for u in data["users"]] == [str(reader.user_id)]
        assert data["pagination"] == {"page": 1, "limit": 50, "total": 1, "totalPages": 1}

    @pytest.mark.asyncio
    async def test_change_role(self, client, reader, admin, auth_headers):
        response = await client.post(
            f"/api/admin/users/{reader.user_id}/role",
            json={"newRole": "author", "reason": "Regular contributor"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["userId"] == str(reader.user_id)
        assert (data["oldRole"], data["newRole"]) == ("reader", "author")
        assert data["changedBy"] == str(admin.user_id)

        listing = await client.get("/api/admin/users?role=author", headers=auth_headers(admin))
        assert [u["id"] for u in listing.json()["data"]["users"]] == [str(reader.user_id)]

    @pytest.mark.asyncio
    async def test_role_guards(self, client, reader, admin, auth_headers):
        own = await client.post(
            f"/api/admin/users/{admin.user_id}/role",
            json={"newRole": "reader"},
            headers=auth_headers(admin),
        )
        assert_error(own, 403, "SELF_DEMOTION_FORBIDDEN")

        same = await client.post(
            f"/api/admin/users/{reader.user_id}/role",
            json={"newRole": "reader"},
            headers=auth_headers(admin),
        )
        assert_error(same, 400, "ROLE_UNCHANGED")

        missing = await client.post(
            f"/api/admin/users/{uuid.uuid4()}/role",
            json={"newRole": "author"},
            headers=auth_headers(admin),
        )
        assert_error(missing, 404, "USER_NOT_FOUND")

        bogus = await client.post(
            f"/api/admin/users/{reader.user_id}/role",
            json={"newRole": "owner"},
            headers=auth_headers(admin),
        )
        assert_error(bogus, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_deactivated_user_is_locked_out(self, client, reader, admin, auth_headers):
        before = await client.get("/api/preferences", headers=auth_headers(reader))
        assert before.status_code == 200

        response = await client.post(
            f"/api/admin/users/{reader.user_id}/deactivate",
            json={"is_active": False, "reason": "Spam"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False

        after = await client.get("/api/preferences", headers=auth_headers(reader))
        body = assert_error(after, 401, "UNAUTHORIZED")
        assert body["message"] == "User account is deactivated"

        again = await client.post(
            f"/api/admin/users/{reader.user_id}/deactivate",
            json={"is_active": False},
            headers=auth_headers(admin),
        )
        assert_error(again, 400, "STATUS_UNCHANGED")

    @pytest.mark.asyncio
    async def test_admin_cannot_deactivate_self(self, client, admin, auth_headers):
        response = await client.post(
            f"/api/admin/users/{admin.user_id}/deactivate",
            json={"is_active": False},
            headers=auth_headers(admin),
        )
        assert_error(response, 403, "SELF_DEACTIVATION_FORBIDDEN")
