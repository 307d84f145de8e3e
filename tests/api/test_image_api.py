"""
API Integration Tests for Image Endpoints
"""

import base64

import numpy as np
from PIL import Image


class TestImageAPI:
    """Integration tests for image loading and export"""

    def test_upload(self, client, uploaded_image):
        response = client.get(f"/api/image/{uploaded_image}")

        assert response.status_code == 200
        data = response.json()
        assert data["width"] == 32
        assert data["height"] == 24
        assert data["channels"] == 3
        assert data["color_mode"] == "rgb"
        assert data["source"] == "base64"

    def test_load_from_path(self, client, png_path):
        response = client.post("/api/image/load", json={"path": str(png_path)})

        assert response.status_code == 200
        assert response.json()["image_id"].startswith("img_")

    def test_load_missing_file(self, client, tmp_path):
        response = client.post("/api/image/load", json={"path": str(tmp_path / "nope.png")})

        assert response.status_code == 422
        assert response.json()["error"] == "DecodeError"

    def test_load_relative_to_storage(self, client, png_path):
        response = client.post("/api/image/load", json={"path": png_path.name})

        assert response.status_code == 200
        assert response.json()["width"] == 32

    def test_load_outside_storage_rejected(self, client, tmp_path):
        outside = tmp_path.parent / "outside.png"
        for path in ("../outside.png", str(outside), "/etc/passwd"):
            response = client.post("/api/image/load", json={"path": path})

            assert response.status_code == 400
            assert response.json()["error"] == "ConfigError"
            assert response.json()["parameter"] == "path"

    def test_upload_invalid_base64(self, client):
        response = client.post("/api/image/upload", json={"data_base64": "@@@"})
        assert response.status_code == 422

    def test_list_images(self, client, uploaded_image):
        response = client.get("/api/image/")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["images"][0]["image_id"] == uploaded_image

    def test_unknown_image(self, client):
        response = client.get("/api/image/img_missing")

        assert response.status_code == 404
        assert "img_missing" in response.json()["detail"]

    def test_display(self, client, uploaded_image):
        response = client.get(f"/api/image/{uploaded_image}/display?rows=2")

        assert response.status_code == 200
        rows = response.json()["rows"]
        assert len(rows) == 3
        assert rows[-1] == "... (22 more rows)"

    def test_export(self, client, uploaded_image):
        response = client.get(f"/api/image/{uploaded_image}/export?format=png")

        assert response.status_code == 200
        data = response.json()
        assert data["format"] == "png"

        encoded = base64.b64decode(data["data_base64"])
        assert encoded.startswith(b"\x89PNG")

    def test_save(self, client, uploaded_image, tmp_path, test_array):
        target = tmp_path / "saved.png"
        response = client.post(f"/api/image/{uploaded_image}/save", json={"path": str(target)})

        assert response.status_code == 200
        with Image.open(target) as image:
            assert np.array_equal(np.asarray(image), test_array)

    def test_save_outside_storage_rejected(self, client, uploaded_image, tmp_path):
        target = tmp_path.parent / "escaped.png"
        response = client.post(
            f"/api/image/{uploaded_image}/save", json={"path": "../escaped.png"}
        )

        assert response.status_code == 400
        assert response.json()["parameter"] == "path"
        assert not target.exists()

    def test_release(self, client, uploaded_image):
        response = client.delete(f"/api/image/{uploaded_image}")
        assert response.status_code == 200

        assert client.get(f"/api/image/{uploaded_image}").status_code == 404
        assert client.delete(f"/api/image/{uploaded_image}").status_code == 404


class TestImageOperationsAPI:
    """Integration tests for pixel operation endpoints"""

    def test_brightness(self, client, uploaded_image):
        response = client.post(f"/api/image/{uploaded_image}/brightness", json={"delta": 300})

        assert response.status_code == 200
        assert response.json()["revision"] == 1

        rows = client.get(f"/api/image/{uploaded_image}/display?rows=1").json()["rows"]
        assert rows[0].startswith("(255,255,255)")

    def test_brightness_requires_integer(self, client, uploaded_image):
        response = client.post(f"/api/image/{uploaded_image}/brightness", json={"delta": 1.5})
        assert response.status_code == 422

    def test_blur(self, client, uploaded_image):
        response = client.post(
            f"/api/image/{uploaded_image}/blur", json={"size": 5, "sigma": 1.0}
        )
        assert response.status_code == 200

    def test_blur_even_size(self, client, uploaded_image):
        """Test invalid kernels map to 400 with the offending parameter"""
        response = client.post(
            f"/api/image/{uploaded_image}/blur", json={"size": 4, "sigma": 1.0}
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "ConfigError"
        assert data["parameter"] == "size"

    def test_resize(self, client, uploaded_image):
        response = client.post(
            f"/api/image/{uploaded_image}/resize", json={"width": 8, "height": 6}
        )

        assert response.status_code == 200
        data = response.json()
        assert (data["width"], data["height"]) == (8, 6)

    def test_resize_invalid(self, client, uploaded_image):
        response = client.post(
            f"/api/image/{uploaded_image}/resize", json={"width": 0, "height": 6}
        )
        assert response.status_code == 422

    def test_rotate_expand(self, client, uploaded_image):
        response = client.post(
            f"/api/image/{uploaded_image}/rotate", json={"angle": 90, "canvas": "expand"}
        )

        assert response.status_code == 200
        data = response.json()
        assert (data["width"], data["height"]) == (24, 32)

    def test_rotate_unknown_canvas(self, client, uploaded_image):
        response = client.post(
            f"/api/image/{uploaded_image}/rotate", json={"angle": 90, "canvas": "huge"}
        )
        assert response.status_code == 422

    def test_edges(self, client, uploaded_image):
        response = client.post(f"/api/image/{uploaded_image}/edges")
        assert response.status_code == 200

    def test_operation_on_unknown_image(self, client):
        response = client.post("/api/image/img_missing/brightness", json={"delta": 1})
        assert response.status_code == 404
