from sqlalchemy import func, select

from app.db.models import Category, Product, SubCategory

BASE = "/api/v1/categories"


async def create_category(client, name="Shoes", files=None):
    response = await client.post(BASE, data={"name": name}, files=files)
    assert response.status_code == 200, response.text
    return response.json()["data"]


class TestCategoryCrud:
    """Tests for /api/v1/categories."""

    async def test_create_without_image_then_delete(self, client):
        response = await client.post(BASE, data={"name": "Shoes"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["name"] == "Shoes"
        assert body["data"]["image"] == "no_url"

        category_id = body["data"]["id"]
        response = await client.delete(f"{BASE}/{category_id}")
        assert response.status_code == 200
        assert response.json()["success"] is True

        response = await client.get(f"{BASE}/{category_id}")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Category not found."}

    async def test_create_with_image_uploads_to_categories_folder(
        self, client, png_bytes, stored_files
    ):
        category = await create_category(
            client, files={"img": ("shoes.png", png_bytes, "image/png")}
        )

        assert category["image"].startswith("http://cdn.test/categories/")
        assert len(stored_files("categories")) == 1

    async def test_create_requires_name(self, client):
        response = await client.post(BASE, data={})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Name is required."}

    async def test_create_rejects_unsupported_format(self, client, stored_files):
        response = await client.post(
            BASE, data={"name": "Gifs"}, files={"img": ("anim.gif", b"GIF89a", "image/gif")}
        )

        assert response.status_code == 400
        assert "Unsupported file format" in response.json()["message"]
        assert stored_files("categories") == []

    async def test_create_rejects_huge_image(self, client, huge_png_bytes, stored_files):
        response = await client.post(
            BASE, data={"name": "Posters"}, files={"img": ("huge.png", huge_png_bytes, "image/png")}
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert stored_files("categories") == []

    async def test_create_rejects_overlong_name(self, client, db):
        response = await client.post(BASE, data={"name": "x" * 256})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert db.scalar(select(func.count()).select_from(Category)) == 0

    async def test_list_in_storage_order(self, client):
        await create_category(client, "Shoes")
        await create_category(client, "Bags")

        response = await client.get(BASE)

        assert response.status_code == 200
        assert [c["name"] for c in response.json()["data"]] == ["Shoes", "Bags"]

    async def test_get_with_non_numeric_id_is_validation_error(self, client):
        response = await client.get(f"{BASE}/abc")

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestCategoryUpdate:

    async def test_update_without_any_image_fails_validation(self, client):
        category = await create_category(client)

        response = await client.put(f"{BASE}/{category['id']}", data={"name": "Boots"})

        assert response.status_code == 400
        assert response.json()["message"] == "Name and image are required."

    async def test_update_requires_name(self, client, png_bytes):
        category = await create_category(
            client, files={"img": ("shoes.png", png_bytes, "image/png")}
        )

        response = await client.put(f"{BASE}/{category['id']}", data={})

        assert response.status_code == 400

    async def test_update_keeps_stored_image(self, client, png_bytes):
        category = await create_category(
            client, files={"img": ("shoes.png", png_bytes, "image/png")}
        )

        response = await client.put(f"{BASE}/{category['id']}", data={"name": "Boots"})

        assert response.status_code == 200
        assert response.json()["data"] == {
            "id": category["id"],
            "name": "Boots",
            "image": category["image"],
        }

    async def test_update_with_new_file_replaces_image(
        self, client, png_bytes, jpeg_bytes, stored_files
    ):
        category = await create_category(
            client, files={"img": ("shoes.png", png_bytes, "image/png")}
        )

        response = await client.put(
            f"{BASE}/{category['id']}",
            data={"name": "Shoes"},
            files={"img": ("new.jpg", jpeg_bytes, "image/jpeg")},
        )

        assert response.status_code == 200
        new_image = response.json()["data"]["image"]
        assert new_image != category["image"]
        assert new_image.endswith(".jpg")
        assert stored_files("categories") == [new_image.rsplit("/", 1)[-1]]

    async def test_update_with_image_url_field(self, client):
        category = await create_category(client)

        response = await client.put(
            f"{BASE}/{category['id']}",
            data={"name": "Shoes", "image": "https://images.example/shoes.png"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["image"] == "https://images.example/shoes.png"

    async def test_update_unknown_category(self, client):
        response = await client.put(
            f"{BASE}/999", data={"name": "Ghost", "image": "https://images.example/x.png"}
        )

        assert response.status_code == 404

    async def test_update_unknown_category_without_image_is_validation_error(self, client):
        response = await client.put(f"{BASE}/999", data={"name": "Ghost"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Name and image are required."}

    async def test_update_rejects_overlong_name(self, client):
        category = await create_category(client)

        response = await client.put(
            f"{BASE}/{category['id']}",
            data={"name": "x" * 256, "image": "https://images.example/shoes.png"},
        )

        assert response.status_code == 400
        assert (await client.get(f"{BASE}/{category['id']}")).json()["data"]["name"] == "Shoes"


class TestCategoryDeleteGuard:

    async def test_delete_blocked_by_subcategory(self, client):
        category = await create_category(client)
        response = await client.post(
            "/api/v1/subcategories", json={"name": "Sneakers", "categoryId": category["id"]}
        )
        assert response.status_code == 200

        response = await client.delete(f"{BASE}/{category['id']}")

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Cannot delete category. Subcategories are referencing it.",
        }
        response = await client.get(f"{BASE}/{category['id']}")
        assert response.status_code == 200

    async def test_delete_blocked_by_product(self, client, db):
        target = Category(name="Shoes")
        other = Category(name="Misc")
        db.add_all([target, other])
        db.flush()
        subcategory = SubCategory(name="Any", category_id=other.id)
        db.add(subcategory)
        db.flush()
        db.add(
            Product(
                name="Runner",
                quantity=1,
                price=10,
                category_id=target.id,
                subcategory_id=subcategory.id,
            )
        )
        db.commit()

        response = await client.delete(f"{BASE}/{target.id}")

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete category. Products are referencing it."
        assert (await client.get(f"{BASE}/{target.id}")).status_code == 200

    async def test_delete_succeeds_after_dependents_removed(self, client):
        category = await create_category(client)
        response = await client.post(
            "/api/v1/subcategories", json={"name": "Sneakers", "categoryId": category["id"]}
        )
        subcategory_id = response.json()["data"]["id"]

        assert (await client.delete(f"/api/v1/subcategories/{subcategory_id}")).status_code == 200
        assert (await client.delete(f"{BASE}/{category['id']}")).status_code == 200

    async def test_delete_removes_stored_image(self, client, png_bytes, stored_files):
        category = await create_category(
            client, files={"img": ("shoes.png", png_bytes, "image/png")}
        )

        response = await client.delete(f"{BASE}/{category['id']}")

        assert response.status_code == 200
        assert stored_files("categories") == []

    async def test_delete_unknown_category(self, client):
        response = await client.delete(f"{BASE}/12345")

        assert response.status_code == 404
        assert response.json()["success"] is False
