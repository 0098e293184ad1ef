"""Tests for technician links on service items."""

from fleetledger.domain.assignments import UNKNOWN_TECHNICIAN_NAME, TechnicianAssignmentService


def test_link_items(temp_db, seeded_directory, settings):
    temp_db.create_service_record(
        "s1",
        {
            "serviceItems": [
                {"name": "Oil", "technicianName": "luis gomez"},
                {"name": "Brakes", "technicianName": "Ana"},
                {"name": "Tires", "technicianName": "José", "technicianId": "u3"},
            ]
        },
    )
    temp_db.create_service_record("s2", {"serviceItems": [{"name": "Wash", "technicianName": "Nadie"}]})
    service = TechnicianAssignmentService(temp_db, settings)

    preview = service.link_items()
    assert preview.created == 1
    assert preview.updated == 1
    assert "technicianId" not in temp_db.get_service_record("s1").fields["serviceItems"][0]

    summary = service.link_items(execute=True)

    items = temp_db.get_service_record("s1").fields["serviceItems"]
    assert summary.updated == 1
    assert summary.ambiguous_names == {"Ana"}
    assert summary.unmatched_names == {"Nadie"}
    assert items[0]["technicianId"] == "u4"
    assert "technicianId" not in items[1]
    assert items[2]["technicianId"] == "u3"


def test_find_missing_technicians(temp_db, seeded_directory, settings):
    temp_db.create_service_record(
        "s1",
        {
            "serviceItems": [
                {"technicianId": "u1", "technicianName": "Ana Torres"},
                {"technicianId": "gone", "technicianName": "Former Tech"},
                {"technicianId": "anon"},
            ]
        },
    )
    temp_db.create_service_record("s2", {"serviceItems": "not a list"})

    missing = TechnicianAssignmentService(temp_db, settings).find_missing_technicians()

    assert missing == {"gone": "Former Tech", "anon": UNKNOWN_TECHNICIAN_NAME}
