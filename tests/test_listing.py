"""Tests for the list-view derivation (search, filters, sort) and view state."""
import httpx

from app.schemas.farm import FarmCreate, FarmRead
from app.schemas.listing import SortDirection, ViewStatus
from app.services import farm_service, farmer_service
from app.services.listing import (
    SortState,
    derive_view,
    facet_values,
    matches_search,
    sort_records,
)

RECORDS = [
    {"name": "Green Valley Farm", "location": "Kiambu County", "owner": "John Kamau", "area": 25.5, "status": "active"},
    {"name": "sunrise organic", "location": "Nakuru County", "owner": "Mary Wanjiku", "area": 45.2, "status": "active"},
    {"name": "Highland Coffee Estate", "location": "Nyeri County", "owner": "David Mwangi", "area": 120.8, "status": "pending"},
    {"name": "Fresh Herbs Kenya", "location": "Meru County", "owner": "Grace Njeri", "area": 25.5, "status": "active"},
]
SEARCH_FIELDS = ("name", "location", "owner")


def names(records):
    return [r["name"] for r in records]


class TestSearch:
    def test_search_is_case_insensitive_substring(self):
        result = derive_view(RECORDS, search="COUNTY", search_fields=SEARCH_FIELDS, sort=SortState("name"))
        assert len(result) == 4

        result = derive_view(RECORDS, search="valley", search_fields=SEARCH_FIELDS, sort=SortState("name"))
        assert names(result) == ["Green Valley Farm"]

    def test_search_matches_exactly_the_records_with_the_term(self):
        for term in ["an", "ka", "n", "xyz", "Njeri", "nyeri"]:
            result = derive_view(RECORDS, search=term, search_fields=SEARCH_FIELDS, sort=SortState("name"))
            expected = [
                r for r in RECORDS
                if any(term.lower() in r[f].lower() for f in SEARCH_FIELDS)
            ]
            assert sorted(names(result)) == sorted(names(expected))

    def test_only_designated_fields_are_searched(self):
        assert not matches_search(RECORDS[0], "active", SEARCH_FIELDS)
        assert matches_search(RECORDS[0], "active", ("status",))

    def test_blank_search_keeps_everything(self):
        assert len(derive_view(RECORDS, search="  ", search_fields=SEARCH_FIELDS, sort=SortState("name"))) == 4


class TestFilters:
    def test_equality_filter(self):
        result = derive_view(RECORDS, filters={"status": "pending"}, sort=SortState("name"))
        assert names(result) == ["Highland Coffee Estate"]

    def test_all_and_none_disable_the_filter(self):
        assert len(derive_view(RECORDS, filters={"status": "all"}, sort=SortState("name"))) == 4
        assert len(derive_view(RECORDS, filters={"status": None}, sort=SortState("name"))) == 4

    def test_facets_are_distinct_and_sorted(self):
        assert facet_values(RECORDS, "status") == ["active", "pending"]


class TestSort:
    def test_same_field_twice_reverses(self):
        sort = SortState("name").toggle("name")
        assert sort == SortState("name", SortDirection.DESC)
        assert sort.toggle("name") == SortState("name", SortDirection.ASC)

    def test_new_field_resets_to_ascending(self):
        sort = SortState("name", SortDirection.DESC).toggle("area")
        assert sort == SortState("area", SortDirection.ASC)

    def test_strings_ignore_case(self):
        result = sort_records(RECORDS, SortState("name"))
        assert names(result) == [
            "Fresh Herbs Kenya",
            "Green Valley Farm",
            "Highland Coffee Estate",
            "sunrise organic",
        ]

    def test_accented_names_sort_with_base_letter(self):
        records = [{"name": "Zebra Farm"}, {"name": "Éden Farm"}, {"name": "Apple Farm"}, {"name": "Eden Acres"}]
        assert names(sort_records(records, SortState("name"))) == [
            "Apple Farm",
            "Eden Acres",
            "Éden Farm",
            "Zebra Farm",
        ]
        assert facet_values(records, "name")[-1] == "Zebra Farm"

    def test_numbers_sort_numerically_and_stable(self):
        asc = sort_records(RECORDS, SortState("area"))
        assert names(asc) == [
            "Green Valley Farm",
            "Fresh Herbs Kenya",
            "sunrise organic",
            "Highland Coffee Estate",
        ]
        desc = sort_records(RECORDS, SortState("area", SortDirection.DESC))
        # Empates conservan el orden original también en descendente
        assert names(desc) == [
            "Highland Coffee Estate",
            "sunrise organic",
            "Green Valley Farm",
            "Fresh Herbs Kenya",
        ]

    def test_missing_values_go_last(self):
        records = RECORDS + [{"name": "No Area Farm", "location": "", "owner": "", "area": None}]
        assert sort_records(records, SortState("area"))[-1]["name"] == "No Area Farm"
        assert sort_records(records, SortState("area", SortDirection.DESC))[-1]["name"] == "No Area Farm"

    def test_derivation_is_pure(self):
        before = [dict(r) for r in RECORDS]
        first = derive_view(RECORDS, search="a", search_fields=SEARCH_FIELDS, sort=SortState("area", SortDirection.DESC))
        second = derive_view(RECORDS, search="a", search_fields=SEARCH_FIELDS, sort=SortState("area", SortDirection.DESC))
        assert first == second
        assert RECORDS == before


class TestResourceView:
    def test_loaded_view_reports_ok(self, backend, gateway, farms_payload):
        backend.listing("farm", farms_payload)

        page = farm_service.list_farms(gateway, status="active")

        assert page.status == ViewStatus.OK
        assert page.total == 4
        assert [f.name for f in page.items] == ["Green Valley Farm", "Sunrise Organic"]
        assert page.facets == {"status": ["active", "pending", "suspended"]}
        assert all(isinstance(f, FarmRead) for f in page.items)
        assert page.items[0].id == "1"

    def test_no_matches_is_empty_not_error(self, backend, gateway, farms_payload):
        backend.listing("farm", farms_payload)

        page = farm_service.list_farms(gateway, search="does-not-exist")

        assert page.status == ViewStatus.EMPTY
        assert page.items == []
        assert page.message is None

    def test_empty_collection(self, backend, gateway):
        backend.listing("farmer", [])

        page = farmer_service.list_farmers(gateway)

        assert page.status == ViewStatus.EMPTY
        assert page.total == 0

    def test_gateway_failure_is_error_state(self, backend, gateway):
        backend.add("GET", "farm", json={"message": "boom"}, status_code=500)

        page = farm_service.list_farms(gateway)

        assert page.status == ViewStatus.ERROR
        assert page.items == []
        assert "boom" in page.message

    def test_transport_failure_is_error_state(self, backend, gateway):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend.add("GET", "farm", refuse)

        page = farm_service.list_farms(gateway)

        assert page.status == ViewStatus.ERROR

    def test_view_is_fetched_once_per_load(self, backend, gateway, farms_payload):
        backend.listing("farm", farms_payload)

        view = farm_service.open_view(gateway)
        view.page(search="farm")
        view.page(sort_field="area_ha", sort_direction=SortDirection.DESC)

        assert len(backend.calls("GET", "farm")) == 1

    def test_farmers_filter_by_county(self, backend, gateway):
        backend.listing("farmer", [
            {"id": 1, "name": "John Kamau", "phone": "+254 712", "email": "john@x.com", "county": "Kiambu", "status": "active"},
            {"id": 2, "name": "Mary Wanjiku", "phone": "+254 723", "email": "mary@x.com", "county": "Nakuru", "status": "active"},
            {"id": 3, "name": "Grace Njeri", "phone": "+254 745", "email": "grace@x.com", "county": "Meru", "status": "pending"},
        ])

        page = farmer_service.list_farmers(gateway, county="Nakuru")

        assert [f.name for f in page.items] == ["Mary Wanjiku"]
        assert page.facets["county"] == ["Kiambu", "Meru", "Nakuru"]

    def test_created_record_joins_open_view_without_relisting(self, backend, gateway, farms_payload):
        backend.listing("farm", farms_payload)
        backend.add(
            "POST",
            "farm",
            json={"data": {"id": 5, "name": "Eden Acres", "location": "Meru County", "areaHa": 9.5}},
            status_code=201,
        )
        view = farm_service.open_view(gateway)

        farm_service.create_farm(
            gateway,
            FarmCreate(name="Eden Acres", location="Meru County", area_ha=9.5, farmer_id="3"),
            view,
        )

        assert [f.name for f in view.page().items][:2] == ["Eden Acres", "Green Valley Farm"]
        assert len(backend.calls("GET", "farm")) == 1
