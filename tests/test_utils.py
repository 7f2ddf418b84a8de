from taxonlink.utils import normalize, normalize_kingdom, strip_prefix


def test_normalize_lowercases_and_strips_quotes():
    assert normalize('"Homo Sapiens"') == "homo sapiens"


def test_normalize_removes_backslashes():
    assert normalize('Homo\\ "sapiens"') == "homo sapiens"


def test_normalize_is_idempotent():
    for name in ['"Homo Sapiens"', "Agathis", "  Padded Name ", 'A\\"b"C', ""]:
        once = normalize(name)
        assert normalize(once) == once


def test_normalize_keeps_whitespace():
    assert normalize("  Homo sapiens ") == "  homo sapiens "


def test_normalize_none():
    assert normalize(None) == ""


def test_normalize_kingdom_synonyms():
    assert normalize_kingdom("Metazoa") == "Animalia"
    assert normalize_kingdom("Viridiplantae") == "Plantae"
    assert normalize_kingdom("Fungi") == "Fungi"
    assert normalize_kingdom(None) is None


def test_strip_prefix():
    assert strip_prefix("http://www.wikidata.org/entity/", "http://www.wikidata.org/entity/Q140") == "Q140"
    assert strip_prefix("http://www.wikidata.org/entity/", "Q140") == "Q140"
    assert strip_prefix("WD:", None) is None
