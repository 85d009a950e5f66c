from translations import TRANSLATIONS, translate


def test_english_by_default():
    assert translate("invoice.total") == "Total:"
    assert translate("status.paid") == "PAID"


def test_other_locales():
    assert translate("invoice.total", "de") == "Gesamt:"
    assert translate("line_item.quantity", "fr") == "Quantité"


def test_regional_locale_falls_back_to_language():
    assert translate("invoice.total", "de-AT") == "Gesamt:"
    assert translate("invoice.total", "nl_BE") == "Totaal:"


def test_unknown_locale_falls_back_to_english():
    assert translate("invoice.total", "pt") == "Total:"


def test_unknown_key_comes_back_as_is():
    assert translate("invoice.nope") == "invoice.nope"


def test_every_locale_has_every_key():
    keys = set(TRANSLATIONS["en"])
    for table in TRANSLATIONS.values():
        assert set(table) == keys
