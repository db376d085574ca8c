from services.catalog_service import (
    DIAGNOSIS_TEMPLATES,
    MEDICINES,
    get_medicine_by_brand,
    get_template,
    medicine_label,
    search_medicines,
)


def test_search_matches_brand_or_generic_name():
    assert [m.brand_name for m in search_medicines("dolo")] == ["Dolo 650"]
    assert [m.brand_name for m in search_medicines("PARACETAMOL")] == ["Dolo 650", "Crocin", "Combiflam"]
    assert search_medicines("no-such-drug") == []


def test_search_blank_query_lists_catalog_up_to_limit():
    assert len(search_medicines("")) == len(MEDICINES)
    assert len(search_medicines("  ", limit=3)) == 3


def test_lookups():
    assert get_medicine_by_brand("Pan 40").generic_name == "Pantoprazole"
    assert get_medicine_by_brand("pan 40") is None
    assert get_template("2").name == "URTI"
    assert get_template("99") is None


def test_every_template_medicine_is_in_the_catalog():
    for template in DIAGNOSIS_TEMPLATES:
        for brand in template.medicines:
            assert get_medicine_by_brand(brand) is not None


def test_medicine_label():
    assert medicine_label(get_medicine_by_brand("Azithral")) == "Azithral (Azithromycin - 500mg)"
