import re

import pytest

from app.billing.modules.customers.assets import (
    delete_customer_image,
    image_extension,
    save_customer_image,
)
from app.billing.modules.customers.validation import ImageUpload
from app.billing.storage import LocalStorage, StorageError, storage_from_config

IMAGE_URL_RE = re.compile(r"^/customers/[0-9a-f-]{36}\.png$")


def test_save_returns_public_path_and_writes_bytes(tmp_path):
    storage = LocalStorage(root=tmp_path / "public")
    url = save_customer_image(storage, ImageUpload(filename="ada.png", data=b"\x89PNG"))

    assert IMAGE_URL_RE.match(url), url
    assert (tmp_path / "public" / url.lstrip("/")).read_bytes() == b"\x89PNG"


def test_directory_created_on_demand(tmp_path):
    root = tmp_path / "does" / "not" / "exist"
    storage = LocalStorage(root=root)
    save_customer_image(storage, ImageUpload(filename="a.jpg", data=b"x"))
    assert (root / "customers").is_dir()


def test_names_are_unique(tmp_path):
    storage = LocalStorage(root=tmp_path)
    img = ImageUpload(filename="same.png", data=b"x")
    urls = {save_customer_image(storage, img) for _ in range(20)}
    assert len(urls) == 20


def test_extension_preserved():
    assert image_extension("photo.JPG") == ".JPG"
    assert image_extension("archive.tar.gz") == ".gz"
    assert image_extension("noext") == ""
    assert image_extension("../../etc/passwd.png") == ".png"


def test_extension_kept_for_non_ascii_names():
    assert image_extension("照片.png") == ".png"
    assert image_extension("фото.JPEG") == ".JPEG"
    assert image_extension("C:\\Users\\me\\ภาพ.webp") == ".webp"


def test_unsafe_extension_is_dropped():
    assert image_extension("a.p/ng") == ""
    assert image_extension("evil.png\n") == ""
    assert image_extension("x.ph p") == ""


def test_non_ascii_upload_keeps_extension(tmp_path):
    storage = LocalStorage(root=tmp_path)
    url = save_customer_image(storage, ImageUpload(filename="照片.png", data=b"x"))
    assert IMAGE_URL_RE.match(url), url


def test_local_storage_never_overwrites(tmp_path):
    storage = LocalStorage(root=tmp_path)
    storage.put_bytes("customers/a.png", b"first")
    with pytest.raises(StorageError):
        storage.put_bytes("customers/a.png", b"second")
    assert (tmp_path / "customers" / "a.png").read_bytes() == b"first"


def test_write_failure_is_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where a directory should be")
    storage = LocalStorage(root=blocker)
    with pytest.raises(StorageError):
        save_customer_image(storage, ImageUpload(filename="a.png", data=b"x"))


def test_delete_is_idempotent(tmp_path):
    storage = LocalStorage(root=tmp_path)
    url = save_customer_image(storage, ImageUpload(filename="a.png", data=b"x"))
    delete_customer_image(storage, url)
    assert not storage.exists(url.lstrip("/"))
    delete_customer_image(storage, url)


def test_storage_from_config_local_uses_asset_root(tmp_path):
    storage = storage_from_config({"STORAGE_BACKEND": "local", "ASSET_ROOT": str(tmp_path)})
    assert isinstance(storage, LocalStorage)
    assert storage.root == tmp_path
