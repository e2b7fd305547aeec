"""
酒店 API 测试
覆盖公开检索 / 详情 / 城市列表，业主管理与管理员操作
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.models.ontology import Booking, Hotel, HotelRoom, RoomType


def _hotel_body(name="Sunrise Hotel", rooms=None):
    return {
        "name": name,
        "description": "Sea view hotel",
        "address": {
            "street": "8 Coast Road",
            "city": "Krabi",
            "state": "Krabi",
            "zipCode": "81000",
            "country": "Thailand"
        },
        "amenities": ["WiFi", "Pool"],
        "rooms": rooms if rooms is not None else [
            {"type": "Double", "price": 3000, "available": 5, "maxGuests": 2}
        ],
    }


class TestSearchHotels:
    """公开检索"""

    @pytest.fixture
    def catalog(self, make_hotel):
        return {
            "goa": make_hotel(name="Goa Sands", city="Goa", rating=4.5,
                              amenities=["WiFi", "Pool"],
                              rooms=[(RoomType.DELUXE, 5000, 3, 2), (RoomType.SINGLE, 1500, 5, 1)]),
            "paris": make_hotel(name="Paris Central", city="Paris", rating=4.8,
                                amenities=["WiFi", "Spa"],
                                rooms=[(RoomType.DOUBLE, 6000, 8, 2)]),
            "bali": make_hotel(name="Bali Bliss", city="Bali", rating=3.9,
                               amenities=["Parking"],
                               rooms=[(RoomType.VILLA, 12000, 2, 4)]),
            "hidden": make_hotel(name="Closed Inn", city="Goa", rating=5.0, is_active=False),
        }

    def test_inactive_hidden(self, client: TestClient, catalog):
        data = client.get("/hotels").json()

        names = [h["name"] for h in data["hotels"]]
        assert "Closed Inn" not in names
        assert data["pagination"]["totalHotels"] == 3

    def test_default_sort_by_rating(self, client: TestClient, catalog):
        names = [h["name"] for h in client.get("/hotels").json()["hotels"]]
        assert names == ["Paris Central", "Goa Sands", "Bali Bliss"]

    def test_sort_by_name(self, client: TestClient, catalog):
        names = [h["name"] for h in client.get("/hotels?sortBy=name").json()["hotels"]]
        assert names == ["Bali Bliss", "Goa Sands", "Paris Central"]

    def test_sort_by_lowest_price(self, client: TestClient, catalog):
        names = [h["name"] for h in client.get("/hotels?sortBy=priceLow").json()["hotels"]]
        assert names == ["Goa Sands", "Paris Central", "Bali Bliss"]

    def test_sort_by_highest_price(self, client: TestClient, catalog):
        names = [h["name"] for h in client.get("/hotels?sortBy=priceHigh").json()["hotels"]]
        assert names == ["Bali Bliss", "Paris Central", "Goa Sands"]

    def test_city_filter_case_insensitive(self, client: TestClient, catalog):
        names = [h["name"] for h in client.get("/hotels?city=goa").json()["hotels"]]
        assert names == ["Goa Sands"]

    def test_text_search(self, client: TestClient, catalog):
        names = [h["name"] for h in client.get("/hotels?search=central").json()["hotels"]]
        assert names == ["Paris Central"]

    def test_text_search_any_term(self, client: TestClient, catalog):
        """多个关键词任一命中即返回"""
        names = [h["name"] for h in client.get("/hotels?search=Goa Paris").json()["hotels"]]
        assert set(names) == {"Goa Sands", "Paris Central"}

    def test_text_search_wildcards_literal(self, client: TestClient, catalog):
        assert client.get("/hotels?search=%25").json()["hotels"] == []
        assert client.get("/hotels?search=_").json()["hotels"] == []

    def test_min_rating(self, client: TestClient, catalog):
        names = [h["name"] for h in client.get("/hotels?rating=4.5").json()["hotels"]]
        assert set(names) == {"Paris Central", "Goa Sands"}

    def test_amenities_any(self, client: TestClient, catalog):
        names = [h["name"] for h in client.get("/hotels?amenities=Spa&amenities=Parking").json()["hotels"]]
        assert set(names) == {"Paris Central", "Bali Bliss"}

    def test_amenities_exact_match(self, client: TestClient, catalog):
        """设施按原值精确匹配：区分大小写，不做通配，不匹配子串"""
        assert client.get("/hotels?amenities=wifi").json()["hotels"] == []
        assert client.get("/hotels?amenities=Wi_i").json()["hotels"] == []
        assert client.get("/hotels?amenities=Wi%25").json()["hotels"] == []
        assert client.get("/hotels?amenities=Wi").json()["hotels"] == []

        names = [h["name"] for h in client.get("/hotels?amenities=WiFi").json()["hotels"]]
        assert set(names) == {"Goa Sands", "Paris Central"}

    def test_price_range_filters_rooms(self, client: TestClient, catalog):
        """价格区间作用于房型，没有符合房型的酒店被去掉"""
        data = client.get("/hotels?minPrice=1000&maxPrice=5500").json()

        hotels = {h["name"]: h for h in data["hotels"]}
        assert set(hotels) == {"Goa Sands"}
        assert {r["type"] for r in hotels["Goa Sands"]["rooms"]} == {"Deluxe", "Single"}

        data = client.get("/hotels?maxPrice=2000").json()
        goa = data["hotels"][0]
        assert [r["type"] for r in goa["rooms"]] == ["Single"]
        assert Decimal(str(goa["rooms"][0]["price"])) == Decimal("1500")
        # 总数按价格过滤前统计
        assert data["pagination"]["totalHotels"] == 3

    def test_pagination(self, client: TestClient, catalog):
        data = client.get("/hotels?page=2&limit=2").json()

        assert len(data["hotels"]) == 1
        assert data["pagination"] == {"currentPage": 2, "totalPages": 2, "totalHotels": 3, "limit": 2}

    def test_invalid_page(self, client: TestClient):
        response = client.get("/hotels?page=0")
        assert response.status_code == 400

    def test_cities(self, client: TestClient, catalog):
        assert client.get("/hotels/cities/list").json() == ["Bali", "Goa", "Paris"]


class TestHotelDetail:
    def test_detail(self, client: TestClient, sample_hotel, owner_user):
        response = client.get(f"/hotels/{sample_hotel.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["ownerId"] == owner_user.id
        assert data["address"]["zipCode"] == "403001"
        assert data["rooms"][0]["maxGuests"] == 2

    def test_inactive_detail_not_found(self, client: TestClient, make_hotel):
        hotel = make_hotel(is_active=False)
        assert client.get(f"/hotels/{hotel.id}").status_code == 404

    def test_unknown_hotel(self, client: TestClient):
        response = client.get("/hotels/9999")

        assert response.status_code == 404
        assert response.json()["error_type"] == "not_found"


class TestCreateHotel:
    def test_owner_creates(self, client: TestClient, owner_user, owner_headers):
        response = client.post("/hotels", headers=owner_headers, json=_hotel_body())

        assert response.status_code == 201
        data = response.json()
        assert data["ownerId"] == owner_user.id
        assert data["isActive"] is True
        assert data["policies"]["checkIn"] == "14:00"

    @pytest.mark.parametrize("headers_fixture", ["guest_headers", "pending_headers", "admin_headers"])
    def test_non_owner_forbidden(self, client: TestClient, request, headers_fixture):
        headers = request.getfixturevalue(headers_fixture)
        response = client.post("/hotels", headers=headers, json=_hotel_body())

        assert response.status_code == 403

    def test_duplicate_room_types_rejected(self, client: TestClient, owner_headers):
        body = _hotel_body(rooms=[
            {"type": "Double", "price": 3000, "available": 5, "maxGuests": 2},
            {"type": "Double", "price": 3500, "available": 2, "maxGuests": 2},
        ])
        response = client.post("/hotels", headers=owner_headers, json=body)

        assert response.status_code == 400

    def test_negative_inventory_rejected(self, client: TestClient, owner_headers):
        body = _hotel_body(rooms=[{"type": "Double", "price": 3000, "available": -1, "maxGuests": 2}])
        assert client.post("/hotels", headers=owner_headers, json=body).status_code == 400

    def test_revoked_owner_forbidden(self, client: TestClient, owner_user, owner_headers, admin_headers):
        client.post(
            f"/auth/reject-owner-request/{owner_user.id}",
            headers=admin_headers,
            json={"rejectionReason": "违规经营"}
        )
        response = client.post("/hotels", headers=owner_headers, json=_hotel_body())

        assert response.status_code == 403
        assert response.json()["status"] == "rejected"


class TestUpdateHotel:
    def test_owner_updates(self, client: TestClient, sample_hotel, owner_headers):
        response = client.put(f"/hotels/{sample_hotel.id}", headers=owner_headers, json={
            "name": "Goa Sands Deluxe",
            "rooms": [
                {"type": "Deluxe", "price": 5500, "available": 4, "maxGuests": 2},
                {"type": "Suite", "price": 9000, "available": 1, "maxGuests": 4},
            ]
        })

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Goa Sands Deluxe"
        assert data["description"] == "Goa Sands Resort description"
        assert {r["type"]: r["available"] for r in data["rooms"]} == {"Deluxe": 4, "Suite": 1}

    def test_owner_cannot_be_changed(self, client: TestClient, sample_hotel, owner_user, other_owner, owner_headers):
        response = client.put(f"/hotels/{sample_hotel.id}", headers=owner_headers, json={
            "ownerId": other_owner.id
        })

        assert response.status_code == 200
        assert response.json()["ownerId"] == owner_user.id

    def test_other_owner_forbidden(self, client: TestClient, sample_hotel, other_owner_headers):
        response = client.put(f"/hotels/{sample_hotel.id}", headers=other_owner_headers, json={"name": "Hijack"})

        assert response.status_code == 403

    def test_admin_updates_any(self, client: TestClient, sample_hotel, admin_headers):
        response = client.put(f"/hotels/{sample_hotel.id}", headers=admin_headers, json={"name": "Admin Edit"})

        assert response.status_code == 200
        assert response.json()["name"] == "Admin Edit"

    def test_unknown_hotel(self, client: TestClient, owner_headers):
        response = client.put("/hotels/9999", headers=owner_headers, json={"name": "X"})
        assert response.status_code == 404


class TestDeleteHotel:
    def test_owner_deletes(self, client: TestClient, db_session, sample_hotel, owner_headers):
        hotel_id = sample_hotel.id
        response = client.delete(f"/hotels/{hotel_id}", headers=owner_headers)

        assert response.status_code == 200
        assert db_session.query(Hotel).filter(Hotel.id == hotel_id).first() is None
        assert db_session.query(HotelRoom).filter(HotelRoom.hotel_id == hotel_id).count() == 0

    def test_admin_deletes_any(self, client: TestClient, db_session, sample_hotel, guest_headers,
                               admin_headers, booking_data):
        hotel_id = sample_hotel.id
        client.post("/bookings", headers=guest_headers, json=booking_data(hotel_id, rooms=1))

        response = client.delete(f"/hotels/{hotel_id}", headers=admin_headers)

        assert response.status_code == 200
        assert db_session.query(Booking).filter(Booking.hotel_id == hotel_id).count() == 0

    def test_other_owner_forbidden(self, client: TestClient, sample_hotel, other_owner_headers):
        response = client.delete(f"/hotels/{sample_hotel.id}", headers=other_owner_headers)
        assert response.status_code == 403

    def test_guest_forbidden(self, client: TestClient, sample_hotel, guest_headers):
        response = client.delete(f"/hotels/{sample_hotel.id}", headers=guest_headers)
        assert response.status_code == 403


class TestToggleStatus:
    def test_toggle(self, client: TestClient, sample_hotel, owner_headers):
        response = client.patch(f"/hotels/{sample_hotel.id}/toggle-status", headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["isActive"] is False
        assert client.get(f"/hotels/{sample_hotel.id}").status_code == 404

        response = client.patch(f"/hotels/{sample_hotel.id}/toggle-status", headers=owner_headers)
        assert response.json()["isActive"] is True
        assert client.get(f"/hotels/{sample_hotel.id}").status_code == 200

    def test_other_owner_forbidden(self, client: TestClient, sample_hotel, other_owner_headers):
        response = client.patch(f"/hotels/{sample_hotel.id}/toggle-status", headers=other_owner_headers)
        assert response.status_code == 403


class TestOwnerViews:
    def test_my_hotels_include_inactive(self, client: TestClient, make_hotel, other_owner, owner_headers):
        make_hotel(name="Open Hotel")
        make_hotel(name="Closed Hotel", is_active=False)
        make_hotel(owner=other_owner, name="Someone Else")

        data = client.get("/hotels/my-hotels", headers=owner_headers).json()
        assert {h["name"] for h in data["hotels"]} == {"Open Hotel", "Closed Hotel"}
        assert data["pagination"]["totalHotels"] == 2

        data = client.get("/hotels/my-hotels?status=inactive", headers=owner_headers).json()
        assert [h["name"] for h in data["hotels"]] == ["Closed Hotel"]

    def test_my_hotels_requires_owner(self, client: TestClient, guest_headers):
        assert client.get("/hotels/my-hotels", headers=guest_headers).status_code == 403

    def test_admin_lists_by_owner(self, client: TestClient, make_hotel, owner_user, admin_headers):
        make_hotel(name="Open Hotel")
        make_hotel(name="Closed Hotel", is_active=False)

        response = client.get(f"/hotels/owner/{owner_user.id}", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_admin_lists_unknown_owner(self, client: TestClient, admin_headers):
        assert client.get("/hotels/owner/9999", headers=admin_headers).status_code == 404

    def test_owner_list_requires_admin(self, client: TestClient, owner_user, owner_headers):
        assert client.get(f"/hotels/owner/{owner_user.id}", headers=owner_headers).status_code == 403
