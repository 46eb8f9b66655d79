from filtercam.catalog import BUILTIN_FILTERS, FilterCatalog
from filtercam.types import FilterDefinition


def test_builtins_come_first_in_order():
    cat = FilterCatalog()
    assert [f.identifier for f in cat.all_filters()] == ["all", "hat", "shades", "shades2", "eyes", "border"]
    assert cat.all_filters()[0].category == "all"


def test_register_from_form_mapping_appends():
    cat = FilterCatalog()
    ok = cat.register_filter({"value": "crown", "label": "Crown", "image": "crown.png", "category": "head"})
    assert ok is True
    assert len(cat) == len(BUILTIN_FILTERS) + 1
    assert cat.all_filters()[-1] == FilterDefinition("crown", "Crown", "crown.png", "head")


def test_register_defaults_category_to_eyes():
    cat = FilterCatalog()
    cat.register_filter({"value": "mono", "label": "Monocle", "image": "mono.png"})
    assert cat.all_filters()[-1].category == "eyes"


def test_empty_image_is_rejected_silently():
    cat = FilterCatalog()
    before = len(cat)
    assert cat.register_filter({"value": "x", "label": "X", "image": "", "category": "eyes"}) is False
    assert len(cat) == before


def test_empty_identifier_and_unknown_category_rejected():
    cat = FilterCatalog()
    assert cat.register_filter(FilterDefinition("", "Nameless", "a.png", "eyes")) is False
    assert cat.register_filter(FilterDefinition("tail", "Tail", "t.png", "tail")) is False
    assert cat.custom_filters == []


def test_duplicate_identifiers_allowed_in_insertion_order():
    cat = FilterCatalog(builtins=[])
    cat.register_filter(FilterDefinition("hat", "Hat A", "a.png", "head"))
    cat.register_filter(FilterDefinition("hat", "Hat B", "b.png", "head"))
    assert [f.label for f in cat.all_filters()] == ["Hat A", "Hat B"]


def test_listeners_notified_only_on_accepted_registration():
    cat = FilterCatalog()
    seen = []
    unsubscribe = cat.subscribe(lambda filters: seen.append(len(filters)))
    cat.register_filter({"value": "bad", "image": ""})
    cat.register_filter({"value": "good", "label": "Good", "image": "g.png"})
    assert seen == [len(BUILTIN_FILTERS) + 1]
    unsubscribe()
    cat.register_filter({"value": "later", "label": "Later", "image": "l.png"})
    assert seen == [len(BUILTIN_FILTERS) + 1]


def test_register_many_counts_accepted():
    cat = FilterCatalog(builtins=[])
    n = cat.register_many([
        {"value": "a", "label": "A", "image": "a.png"},
        {"value": "", "label": "B", "image": "b.png"},
        {"value": "c", "label": "C", "image": "c.png", "category": "frame"},
    ])
    assert n == 2
    assert [f.identifier for f in cat.all_filters()] == ["a", "c"]
