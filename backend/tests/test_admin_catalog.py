import re

from medora.models import Brand, Category, Medicine


def admin_medicine_body(category_id=None, **overrides):
    body = {"name": "Napa Extra 500mg", "genericName": "Paracetamol + Caffeine", "price": 3.5, "stock": 50}
    if category_id is not None:
        body["categoryId"] = category_id
    body.update(overrides)
    return body


# ------------------------------------------------------------------
# medicines
# ------------------------------------------------------------------

def test_create_medicine_without_category_names_the_field(client, admin_headers):
    response = client.post("/api/admin/medicines", headers=admin_headers, json=admin_medicine_body())
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation error"
    assert "categoryId" in [d["field"] for d in body["details"]]


def test_create_medicine_derives_slug_and_sku(client, category, pharmacist_headers):
    response = client.post(
        "/api/admin/medicines", headers=pharmacist_headers, json=admin_medicine_body(category.id)
    )
    assert response.status_code == 201
    body = response.json()
    assert body["slug"] == "napa-extra-500mg"
    assert re.fullmatch(r"MED-\d{13}-[0-9A-Z]{9}", body["sku"])
    assert body["orderItemCount"] == 0


def test_create_medicine_keeps_supplied_sku(client, category, admin_headers):
    response = client.post(
        "/api/admin/medicines", headers=admin_headers, json=admin_medicine_body(category.id, sku="NAPA-X")
    )
    assert response.json()["sku"] == "NAPA-X"


def test_create_medicine_unknown_category(client, admin_headers):
    response = client.post("/api/admin/medicines", headers=admin_headers, json=admin_medicine_body(424242))
    assert response.status_code == 400


def test_create_medicine_customer_forbidden(client, category, customer_headers):
    response = client.post(
        "/api/admin/medicines", headers=customer_headers, json=admin_medicine_body(category.id)
    )
    assert response.status_code == 403


def test_admin_list_medicines_search_and_filters(client, make_medicine, pharmacist_headers):
    make_medicine(name="Napa", sku="NAPA-500-TAB")
    make_medicine(name="Ace", generic_name="Aspirin", active=False)
    make_medicine(name="Histacin", generic_name="Cetirizine")

    def names(**params):
        body = client.get("/api/admin/medicines", headers=pharmacist_headers, params=params).json()
        return {m["name"] for m in body["medicines"]}

    assert names() == {"Napa", "Ace", "Histacin"}
    assert names(search="napa-500") == {"Napa"}
    assert names(search="aspirin") == {"Ace"}
    assert names(active="false") == {"Ace"}


def test_update_medicine_rename_rederives_slug(client, make_medicine, admin_headers):
    medicine = make_medicine(name="Old Name", slug="old-name")
    response = client.put(
        f"/api/admin/medicines/{medicine.id}",
        headers=admin_headers,
        json={"name": "Brand New Name", "stock": 5},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["slug"] == "brand-new-name"
    assert body["stock"] == 5
    assert client.get("/api/medicines/brand-new-name").status_code == 200


def test_get_missing_medicine(client, admin_headers):
    assert client.get("/api/admin/medicines/999", headers=admin_headers).status_code == 404


def test_delete_medicine_with_orders_is_blocked(client, db, make_medicine, make_order, customer, admin_headers):
    medicine = make_medicine()
    make_order(customer, medicine)

    response = client.delete(f"/api/admin/medicines/{medicine.id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {
        "error": "Cannot delete medicine with existing orders. Consider deactivating instead."
    }
    db.expire_all()
    assert db.query(Medicine).filter(Medicine.id == medicine.id).first() is not None


def test_delete_medicine(client, db, make_medicine, admin_headers, pharmacist_headers):
    medicine = make_medicine()
    assert client.delete(f"/api/admin/medicines/{medicine.id}", headers=pharmacist_headers).status_code == 403

    assert client.delete(f"/api/admin/medicines/{medicine.id}", headers=admin_headers).status_code == 200
    db.expire_all()
    assert db.query(Medicine).count() == 0


# ------------------------------------------------------------------
# categories
# ------------------------------------------------------------------

def test_delete_category_with_medicines_is_blocked(client, db, category, make_medicine, admin_headers):
    make_medicine()

    response = client.delete(f"/api/admin/categories/{category.id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete category with medicines"}
    db.expire_all()
    assert db.query(Category).filter(Category.id == category.id).first() is not None


def test_delete_category_with_subcategories_is_blocked(client, db, category, admin_headers):
    db.add(Category(name="Headache", slug="headache", parent_id=category.id))
    db.commit()

    response = client.delete(f"/api/admin/categories/{category.id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete category with subcategories"}


def test_delete_empty_category(client, category, admin_headers):
    response = client.delete(f"/api/admin/categories/{category.id}", headers=admin_headers)
    assert response.status_code == 200

    listed = client.get("/api/admin/categories", headers=admin_headers).json()["categories"]
    assert category.id not in [c["id"] for c in listed]
    assert client.get("/api/categories").json()["categories"] == []


def test_create_and_update_category(client, category, admin_headers):
    response = client.post(
        "/api/admin/categories",
        headers=admin_headers,
        json={"name": "Cold & Flu", "description": "Seasonal", "parentId": category.id},
    )
    assert response.status_code == 201
    created = response.json()
    assert created["slug"] == "cold-flu"
    assert created["parent"]["id"] == category.id
    assert created["medicineCount"] == 0

    renamed = client.put(
        f"/api/admin/categories/{created['id']}", headers=admin_headers, json={"name": "Cough & Cold"}
    )
    assert renamed.json()["slug"] == "cough-cold"

    listed = client.get("/api/admin/categories", headers=admin_headers).json()["categories"]
    parent = next(c for c in listed if c["id"] == category.id)
    assert [c["name"] for c in parent["children"]] == ["Cough & Cold"]


def test_duplicate_category_is_conflict(client, category, admin_headers):
    response = client.post("/api/admin/categories", headers=admin_headers, json={"name": "Pain Relief"})
    assert response.status_code == 409


def test_category_cannot_parent_itself(client, category, admin_headers):
    response = client.put(
        f"/api/admin/categories/{category.id}", headers=admin_headers, json={"parentId": category.id}
    )
    assert response.status_code == 400


def test_pharmacist_reads_but_does_not_write_categories(client, pharmacist_headers):
    assert client.get("/api/admin/categories", headers=pharmacist_headers).status_code == 200
    response = client.post("/api/admin/categories", headers=pharmacist_headers, json={"name": "X"})
    assert response.status_code == 403


# ------------------------------------------------------------------
# brands
# ------------------------------------------------------------------

def test_brand_crud(client, db, admin_headers):
    created = client.post(
        "/api/admin/brands", headers=admin_headers, json={"name": "Incepta Pharmaceuticals"}
    )
    assert created.status_code == 201
    brand_id = created.json()["id"]
    assert created.json()["slug"] == "incepta-pharmaceuticals"

    assert client.post(
        "/api/admin/brands", headers=admin_headers, json={"name": "Incepta Pharmaceuticals"}
    ).status_code == 409

    updated = client.put(f"/api/admin/brands/{brand_id}", headers=admin_headers, json={"logo": "/logo.png"})
    assert updated.json()["logo"] == "/logo.png"

    assert client.delete(f"/api/admin/brands/{brand_id}", headers=admin_headers).status_code == 200
    db.expire_all()
    assert db.query(Brand).count() == 0


def test_delete_brand_with_medicines_is_blocked(client, brand, make_medicine, admin_headers):
    make_medicine(brand_id=brand.id)
    response = client.delete(f"/api/admin/brands/{brand.id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete brand with medicines"}

    listed = client.get("/api/admin/brands", headers=admin_headers).json()["brands"]
    assert listed[0]["medicineCount"] == 1


# ------------------------------------------------------------------
# explicit nulls on partial updates
# ------------------------------------------------------------------

def test_update_medicine_rejects_null_for_required_fields(client, db, make_medicine, admin_headers):
    medicine = make_medicine(price=12.0)

    response = client.put(
        f"/api/admin/medicines/{medicine.id}", headers=admin_headers, json={"categoryId": None, "price": None}
    )
    assert response.status_code == 400
    assert {d["field"] for d in response.json()["details"]} == {"categoryId", "price"}

    db.expire_all()
    assert db.query(Medicine).filter(Medicine.id == medicine.id).one().price == 12.0


def test_update_medicine_can_clear_optional_fields(client, brand, make_medicine, admin_headers):
    medicine = make_medicine(brand_id=brand.id, discount_price=8.0)
    response = client.put(
        f"/api/admin/medicines/{medicine.id}", headers=admin_headers, json={"brandId": None, "discountPrice": None}
    )
    assert response.status_code == 200
    assert response.json()["brandId"] is None
    assert response.json()["discountPrice"] is None


def test_update_category_rejects_null_name(client, category, admin_headers):
    response = client.put(f"/api/admin/categories/{category.id}", headers=admin_headers, json={"name": None})
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "name"


def test_update_brand_rejects_null_name(client, brand, admin_headers):
    response = client.put(f"/api/admin/brands/{brand.id}", headers=admin_headers, json={"name": None})
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "name"
