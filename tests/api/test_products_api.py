import pytest

from app.db.models import Brand, Variant, VariantType

BASE = "/api/v1/products"


@pytest.fixture
async def catalog(client):
    """Category with one subcategory, created through the API."""
    category = (await client.post("/api/v1/categories", data={"name": "Shoes"})).json()["data"]
    response = await client.post(
        "/api/v1/subcategories", json={"name": "Sneakers", "categoryId": category["id"]}
    )
    return {"category": category, "subcategory": response.json()["data"]}


def product_form(catalog, **overrides):
    form = {
        "name": "Runner",
        "description": "Lightweight running shoe",
        "quantity": "10",
        "price": "99.5",
        "proCategoryId": str(catalog["category"]["id"]),
        "proSubCategoryId": str(catalog["subcategory"]["id"]),
    }
    form.update(overrides)
    return form


def image_files(slots, content, filename="photo.png"):
    return {f"image{slot}": (filename, content, "image/png") for slot in slots}


class TestCreateProduct:

    async def test_create_with_three_of_five_slots(self, client, catalog, png_bytes, stored_files):
        response = await client.post(
            BASE, data=product_form(catalog), files=image_files([1, 3, 5], png_bytes)
        )

        assert response.status_code == 200, response.text
        data = response.json()["data"]
        assert [image["image"] for image in data["images"]] == [1, 3, 5]
        assert all(image["url"].startswith("http://cdn.test/products/") for image in data["images"])
        assert len(stored_files("products")) == 3

    async def test_create_resolves_references(self, client, catalog, db):
        size = VariantType(name="Size", type="size")
        db.add_all([Brand(name="Acme"), size])
        db.flush()
        db.add(Variant(name="XL", variant_type_id=size.id))
        db.commit()
        brand_id = db.query(Brand).one().id
        variant_id = db.query(Variant).one().id

        response = await client.post(
            BASE,
            data=product_form(
                catalog,
                offerPrice="79",
                proBrandId=str(brand_id),
                proVariantTypeId=str(size.id),
                proVariantId=str(variant_id),
            ),
        )

        assert response.status_code == 200, response.text
        product_id = response.json()["data"]["id"]
        data = (await client.get(f"{BASE}/{product_id}")).json()["data"]
        assert data["proCategoryId"] == {"id": catalog["category"]["id"], "name": "Shoes"}
        assert data["proSubCategoryId"] == {"id": catalog["subcategory"]["id"], "name": "Sneakers"}
        assert data["proBrandId"] == {"id": brand_id, "name": "Acme"}
        assert data["proVariantTypeId"] == {"id": size.id, "name": "Size", "type": "size"}
        assert data["proVariantId"] == {"id": variant_id, "name": "XL"}
        assert data["offerPrice"] == 79
        assert data["images"] == []

    async def test_create_requires_fields(self, client, catalog):
        form = product_form(catalog)
        del form["price"]

        response = await client.post(BASE, data=form)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Required fields are missing."}

    async def test_create_rejects_overlong_name(self, client, catalog):
        response = await client.post(BASE, data=product_form(catalog, name="x" * 256))

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert (await client.get(BASE)).json()["data"] == []

    async def test_create_rejects_unknown_category(self, client, catalog):
        response = await client.post(BASE, data=product_form(catalog, proCategoryId="999"))

        assert response.status_code == 400
        assert response.json()["message"] == "Referenced category does not exist."

    async def test_create_rejects_subcategory_of_other_category(self, client, catalog):
        other = (await client.post("/api/v1/categories", data={"name": "Bags"})).json()["data"]

        response = await client.post(BASE, data=product_form(catalog, proCategoryId=str(other["id"])))

        assert response.status_code == 400
        assert response.json()["message"] == "Subcategory does not belong to the selected category."

    async def test_failed_upload_aborts_whole_create(self, client, catalog, png_bytes, stored_files):
        files = image_files([1], png_bytes)
        files["image2"] = ("broken.png", b"not an image", "image/png")

        response = await client.post(BASE, data=product_form(catalog), files=files)

        assert response.status_code == 400
        assert stored_files("products") == []
        assert (await client.get(BASE)).json()["data"] == []


class TestUpdateProduct:

    async def test_replacing_slot_two_leaves_other_slots(
        self, client, catalog, png_bytes, jpeg_bytes, stored_files
    ):
        created = (
            await client.post(BASE, data=product_form(catalog), files=image_files([1, 2, 3], png_bytes))
        ).json()["data"]
        before = {image["image"]: image["url"] for image in created["images"]}

        response = await client.put(
            f"{BASE}/{created['id']}", files={"image2": ("new.jpg", jpeg_bytes, "image/jpeg")}
        )

        assert response.status_code == 200, response.text
        after = {image["image"]: image["url"] for image in response.json()["data"]["images"]}
        assert after[1] == before[1]
        assert after[3] == before[3]
        assert after[2] != before[2]
        assert after[2].endswith(".jpg")
        # Replaced file is removed from storage
        assert len(stored_files("products")) == 3
        assert before[2].rsplit("/", 1)[-1] not in stored_files("products")

    async def test_new_slot_is_appended(self, client, catalog, png_bytes):
        created = (
            await client.post(BASE, data=product_form(catalog), files=image_files([1], png_bytes))
        ).json()["data"]

        response = await client.put(f"{BASE}/{created['id']}", files=image_files([4], png_bytes))

        assert [image["image"] for image in response.json()["data"]["images"]] == [1, 4]

    async def test_partial_update_allows_zero_price(self, client, catalog):
        created = (await client.post(BASE, data=product_form(catalog))).json()["data"]

        response = await client.put(f"{BASE}/{created['id']}", data={"price": "0", "quantity": "0"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 0
        assert data["quantity"] == 0
        assert data["name"] == "Runner"
        assert data["description"] == "Lightweight running shoe"

    async def test_update_validates_references(self, client, catalog):
        created = (await client.post(BASE, data=product_form(catalog))).json()["data"]

        response = await client.put(f"{BASE}/{created['id']}", data={"proSubCategoryId": "404"})

        assert response.status_code == 400
        assert response.json()["message"] == "Referenced subcategory does not exist."

    async def test_update_unknown_product(self, client):
        response = await client.put(f"{BASE}/999", data={"name": "Ghost"})

        assert response.status_code == 404
        assert response.json()["message"] == "Product not found."


class TestDeleteProduct:

    async def test_delete_removes_images_and_document(self, client, catalog, png_bytes, stored_files):
        created = (
            await client.post(BASE, data=product_form(catalog), files=image_files([1, 2], png_bytes))
        ).json()["data"]

        response = await client.delete(f"{BASE}/{created['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Product and associated images deleted successfully."
        assert stored_files("products") == []
        assert (await client.get(f"{BASE}/{created['id']}")).status_code == 404

    async def test_delete_unknown_product(self, client):
        response = await client.delete(f"{BASE}/999")

        assert response.status_code == 404
