"""Tests for the admin logo endpoints and the replace-and-clean-up storage."""

import io

import pytest

from app.core.config import settings
from app.core.errors import PayloadTooLarge
from app.crud.app_settings import get_logo_filename, set_logo_filename
from app.services.logo import logo_url, replace_logo
from app.services.logo_store import logo_store

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _upload(client, headers, name="brand.png", content=PNG_BYTES, content_type="image/png"):
    return client.post("/admin/logo", headers=headers, files={"file": (name, content, content_type)})


def test_default_logo_when_unset(client):
    response = client.get("/admin/logo")

    assert response.status_code == 200
    assert response.json() == {"logoUrl": f"{settings.public_base_url}/logo.png"}


def test_upload_requires_bearer(client):
    assert _upload(client, {}).status_code == 401


def test_upload_stores_file_and_updates_url(client, auth_headers, uploads_dir):
    response = _upload(client, auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["logoUrl"].startswith(f"{settings.public_base_url}/uploads/logo-")
    assert body["logoUrl"].endswith(".png")

    stored = body["logoUrl"].rsplit("/", 1)[-1]
    assert (uploads_dir / stored).read_bytes() == PNG_BYTES
    assert client.get("/admin/logo").json() == {"logoUrl": body["logoUrl"]}
    assert logo_store.get() == body["logoUrl"]


def test_replacing_logo_removes_previous_file(client, auth_headers, uploads_dir):
    first = _upload(client, auth_headers).json()["logoUrl"].rsplit("/", 1)[-1]
    second = _upload(client, auth_headers, name="brand.WEBP", content_type="image/webp").json()["logoUrl"]
    second_name = second.rsplit("/", 1)[-1]

    assert second_name.endswith(".webp")
    assert not (uploads_dir / first).exists()
    assert (uploads_dir / second_name).exists()
    assert sorted(p.name for p in uploads_dir.iterdir()) == [second_name]


@pytest.mark.parametrize("content_type", ["text/plain", "image/gif", "application/octet-stream"])
def test_rejects_unsupported_types(client, auth_headers, uploads_dir, content_type):
    response = _upload(client, auth_headers, name="x.bin", content_type=content_type)

    assert response.status_code == 415
    assert list(uploads_dir.iterdir()) == []


def test_rejects_oversized_upload(client, auth_headers, uploads_dir, monkeypatch):
    monkeypatch.setattr(settings, "LOGO_MAX_BYTES", 16)

    response = _upload(client, auth_headers)

    assert response.status_code == 413
    assert list(uploads_dir.iterdir()) == []
    assert client.get("/admin/logo").json()["logoUrl"].endswith("/logo.png")


def test_rejects_missing_file(client, auth_headers):
    response = client.post("/admin/logo", headers=auth_headers)
    assert response.status_code == 400
    assert _upload(client, auth_headers, content=b"").status_code == 400


def test_logo_url_uses_basename_of_stored_path():
    assert logo_url("/srv/public/uploads/logo-1.png") == f"{settings.public_base_url}/uploads/logo-1.png"
    assert logo_url(None) == f"{settings.public_base_url}/logo.png"


def test_failed_cleanup_of_previous_file_is_swallowed(db_session, uploads_dir):
    # A directory in place of the old file makes unlink fail.
    (uploads_dir / "logo-old.png").mkdir()
    set_logo_filename(db_session, "logo-old.png")

    url = replace_logo(db_session, "new.png", "image/png", io.BytesIO(PNG_BYTES))

    new_name = url.rsplit("/", 1)[-1]
    assert get_logo_filename(db_session) == new_name
    assert (uploads_dir / "logo-old.png").is_dir()


def test_oversize_leaves_settings_untouched(db_session, uploads_dir, monkeypatch):
    monkeypatch.setattr(settings, "LOGO_MAX_BYTES", 4)
    set_logo_filename(db_session, "logo-keep.png")

    with pytest.raises(PayloadTooLarge):
        replace_logo(db_session, "big.png", "image/png", io.BytesIO(PNG_BYTES))

    assert get_logo_filename(db_session) == "logo-keep.png"
