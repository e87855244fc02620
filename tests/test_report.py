from hometour.report import (
    MAX_PHOTOS_PER_PAGE,
    ReportRenderer,
    is_answered,
    render_report_pdf,
    section_photo_pages,
)
from hometour.survey import get_report_section, new_record


def test_render_report_pdf_returns_a_pdf(sample_record):
    data = render_report_pdf(sample_record, "Overall score: 3.4/5 for Kerkstraat 1 on 2024-05-01.", 3.4)
    assert data.startswith(b"%PDF")
    assert len(data) > 1024


def test_cover_plus_one_page_per_section():
    renderer = ReportRenderer(new_record(), "", 0)
    renderer.render()
    assert renderer.pdf.page_no() == 9


def test_photos_are_capped_at_two_pages_per_section(photo_uri):
    record = new_record()
    record["livingPhotos"] = [photo_uri] * 30
    pages = section_photo_pages(record, get_report_section("Living"))
    assert [len(page) for page in pages] == [MAX_PHOTOS_PER_PAGE, MAX_PHOTOS_PER_PAGE]

    renderer = ReportRenderer(record, "", None)
    renderer.render()
    assert renderer.pdf.page_no() == 10


def test_sections_without_photo_lists_have_no_photo_pages(photo_uri):
    record = new_record()
    assert section_photo_pages(record, get_report_section("Ask the Makelaar")) == []
    record["kitchenPhotos"] = [photo_uri] * 5
    assert [len(page) for page in section_photo_pages(record, get_report_section("Kitchen"))] == [5]


def test_unreadable_photos_are_skipped(photo_uri):
    record = new_record()
    record["bathroomPhotos"] = ["data:image/png;base64,not-an-image", "garbage", photo_uri]
    assert render_report_pdf(record, "", 0).startswith(b"%PDF")


def test_is_answered():
    assert not is_answered("kitchenVentilation", 0)
    assert not is_answered("kitchenIssues", "")
    assert not is_answered("surroundingsAmenities", [])
    assert not is_answered("finalNotes", None)
    assert is_answered("kitchenVentilation", 3)
    assert is_answered("bedroomCanDimLight", "yes")


def test_non_latin_text_does_not_break_core_fonts():
    record = new_record()
    record.update({"address": "Straße 5 – “boven”", "finalNotes": "Ça va ✓"})
    assert render_report_pdf(record, "Strong areas: Living & Kitchen…", 4.5).startswith(b"%PDF")


def _long_kitchen(photo_uri, text_length):
    record = new_record()
    record.update(
        {
            "kitchenOverallRating": 4,
            "kitchenCabinetsCountertop": 3,
            "kitchenSinkFaucets": 5,
            "kitchenVentilation": 2,
            "kitchenIssues": ("Loose hinge on the corner cabinet. " * 60)[:text_length],
            "kitchenAppliancesIncluded": "yes",
            "kitchenApplianceList": "Oven, dishwasher, fridge, induction hob",
            "kitchenFinalThoughts": ("Needs a new extractor before moving in. " * 60)[:text_length],
            "kitchenPhotos": [photo_uri] * 24,
        }
    )
    return record


def test_long_fields_and_full_photo_pages_stay_within_two_pages(photo_uri):
    renderer = ReportRenderer(_long_kitchen(photo_uri, 400), "", None)
    renderer.render()
    assert renderer.pdf.page_no() == 10


def test_very_long_fields_never_push_a_section_past_two_pages(photo_uri):
    renderer = ReportRenderer(_long_kitchen(photo_uri, 2000), "", None)
    renderer.render()
    assert renderer.pdf.page_no() <= 10
