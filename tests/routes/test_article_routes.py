"""HTTP tests for the drafts and publish endpoints."""

from __future__ import annotations

import json

import httpx

from brestoise.models.article import ARTICLES_INDEX_KEY, DRAFTS_INDEX_KEY, article_key, draft_key
from tests.conftest import make_settings
from tests.fakes import FailingTransportError, FakeGitHub

BODY = "Une balade gourmande dans les ruelles de Brest, entre crêperies, halles et marchés du matin."
ARTICLE = {"title": "Crêpes à Brest", "category": "Événementiel", "body": BODY, "date": "2024-06-01"}


class TestDrafts:
    """Test the operator drafts endpoint."""

    def test_requires_token(self, make_client, fake_store) -> None:
        response = make_client(store=fake_store).get("/api/drafts")

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Admin token invalide"}

    def test_save_list_get_delete(self, make_client, fake_store, auth_headers) -> None:
        client = make_client(store=fake_store)

        saved = client.post("/api/drafts", json={"title": "Marché de Noël"}, headers=auth_headers)
        listed = client.get("/api/drafts", headers=auth_headers)
        fetched = client.get("/api/drafts", params={"slug": "marche-de-noel"}, headers=auth_headers)
        deleted = client.request("DELETE", "/api/drafts", json={"slug": "Marché de Noël"}, headers=auth_headers)

        assert saved.json() == {"success": True, "slug": "marche-de-noel"}
        assert [d["slug"] for d in listed.json()["drafts"]] == ["marche-de-noel"]
        assert fetched.json()["article"]["status"] == "draft"
        assert deleted.json() == {"success": True, "slug": "marche-de-noel"}
        assert draft_key("marche-de-noel") not in fake_store.documents
        assert fake_store.json(DRAFTS_INDEX_KEY) == []

    def test_missing_draft_is_404(self, make_client, fake_store, auth_headers) -> None:
        response = make_client(store=fake_store).get("/api/drafts?slug=absent", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "Brouillon introuvable"

    def test_title_is_required(self, make_client, fake_store, auth_headers) -> None:
        response = make_client(store=fake_store).post("/api/drafts", json={"body": "x"}, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["error"] == "Le titre est obligatoire pour un brouillon."
        assert fake_store.puts == []

    def test_invalid_json_is_400(self, make_client, fake_store, auth_headers) -> None:
        response = make_client(store=fake_store).post("/api/drafts", content=b"{oops", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "JSON invalide"

    def test_delete_reads_slug_from_query(self, make_client, fake_store, auth_headers) -> None:
        client = make_client(store=fake_store)
        client.post("/api/drafts", json={"title": "Halles"}, headers=auth_headers)

        response = client.delete("/api/drafts?slug=halles", headers=auth_headers)

        assert response.status_code == 200
        assert draft_key("halles") not in fake_store.documents

    def test_delete_without_slug_is_400(self, make_client, fake_store, auth_headers) -> None:
        response = make_client(store=fake_store).delete("/api/drafts", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Slug manquant"

    def test_store_failure_is_502(self, make_client, fake_store, auth_headers) -> None:
        fake_store.fail_put = FailingTransportError()

        response = make_client(store=fake_store).post("/api/drafts", json={"title": "Halles"}, headers=auth_headers)

        assert response.status_code == 502
        assert response.json()["error"] == "Erreur lors de la sauvegarde du brouillon"

    def test_other_methods_not_allowed(self, make_client, auth_headers) -> None:
        response = make_client().put("/api/drafts", json={}, headers=auth_headers)

        assert response.status_code == 405
        assert response.json() == {"success": False, "error": "Méthode non autorisée"}


class TestPublish:
    """Test article publication and removal."""

    def test_requires_token(self, make_client, fake_store) -> None:
        response = make_client(store=fake_store).post("/api/publish", json=ARTICLE)

        assert response.status_code == 401
        assert fake_store.puts == []

    def test_new_article_is_201_and_deploys(self, make_client, fake_store, auth_headers, outbound, tmp_path) -> None:
        settings = make_settings(tmp_path, deploy_hook_url="https://deploy.test/hook")
        client = make_client(settings, store=fake_store)

        response = client.post("/api/publish", json=ARTICLE, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["slug"] == "crepes-a-brest"
        assert body["url"] == "https://a-la-brestoise.vercel.app/articles/crepes-a-brest"
        assert body["files"] == {"article": article_key("crepes-a-brest"), "index": ARTICLES_INDEX_KEY}
        assert body["deployTriggered"] is True
        assert len(outbound.to("deploy.test")) == 1
        assert fake_store.json(article_key("crepes-a-brest"))["category"] == "Événementiel"

    def test_update_is_200(self, make_client, fake_store, auth_headers) -> None:
        client = make_client(store=fake_store)
        client.post("/api/publish", json=ARTICLE, headers=auth_headers)

        response = client.post("/api/publish", json={**ARTICLE, "excerpt": "Neuf"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["deploy"] == {"triggered": False, "error": "Deploy hook non configuré"}

    def test_invalid_fields_are_422(self, make_client, fake_store, auth_headers) -> None:
        response = make_client(store=fake_store).post(
            "/api/publish",
            json={**ARTICLE, "body": "court", "date": "demain"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json() == {
            "success": False,
            "error": "Champs invalides.",
            "errors": {"body": "Le contenu est trop court.", "date": "La date n’est pas valide."},
        }

    def test_delete_reports_what_was_removed(self, make_client, fake_store, auth_headers) -> None:
        client = make_client(store=fake_store)
        client.post("/api/publish", json=ARTICLE, headers=auth_headers)

        response = client.request("DELETE", "/api/publish", json={"slug": "crepes-a-brest"}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["deletedFromIndex"] is True
        assert body["deletedFile"] is True
        assert fake_store.json(ARTICLES_INDEX_KEY) == []

    def test_delete_unknown_article(self, make_client, fake_store, auth_headers) -> None:
        response = make_client(store=fake_store).delete("/api/publish?slug=absent", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["deletedFromIndex"] is False
        assert response.json()["deletedFile"] is False

    def test_store_failure_is_502(self, make_client, fake_store, auth_headers) -> None:
        fake_store.fail_get = FailingTransportError()

        response = make_client(store=fake_store).post("/api/publish", json=ARTICLE, headers=auth_headers)

        assert response.status_code == 502
        assert response.json()["error"] == "Erreur GitHub, vérifiez le dépôt / la branche / le token."
        assert "details" in response.json()

    def test_local_mode_writes_files_without_deploy(self, make_client, auth_headers, tmp_path) -> None:
        settings = make_settings(tmp_path, deploy_hook_url="https://deploy.test/hook")

        response = make_client(settings).post("/api/publish", json=ARTICLE, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["deployTriggered"] is False
        stored = json.loads((tmp_path / article_key("crepes-a-brest")).read_text(encoding="utf-8"))
        assert stored["title"] == "Crêpes à Brest"

    def test_github_round_trip(self, make_client, auth_headers, tmp_path) -> None:
        github = FakeGitHub()
        client = make_client(make_settings(tmp_path, repo="owner/site", token="tok"), transport=github)

        published = client.post("/api/publish", json=ARTICLE, headers=auth_headers)
        deleted = client.delete("/api/publish?slug=crepes-a-brest", headers=auth_headers)

        assert published.status_code == 201
        assert deleted.json()["deletedFile"] is True
        assert article_key("crepes-a-brest") not in github.files
        assert any(r.method == "DELETE" for r in github.requests)

    def test_github_unreachable_is_502(self, make_client, auth_headers, tmp_path) -> None:
        github = FakeGitHub()
        github.raise_error = httpx.ConnectTimeout("timed out")
        client = make_client(make_settings(tmp_path, repo="owner/site", token="tok"), transport=github)

        response = client.post("/api/publish", json=ARTICLE, headers=auth_headers)

        assert response.status_code == 502
        assert response.json()["success"] is False
