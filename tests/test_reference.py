# file: tests/test_reference.py
from __future__ import annotations

from pathlib import Path

import phonenumbers
import pytest

from phonedial.core.localtime import report_local_time
from phonedial.reference import (
    COMMON_DIAL_CODES,
    ReferenceDataError,
    default_country_table,
    flag_for_code,
    load_country_table,
)


def test_bundled_table_has_unique_codes() -> None:
    table = default_country_table()
    codes = [c.code for c in table.countries]
    assert len(codes) == len(set(codes))
    assert len(table) > 150


def test_dial_codes_agree_with_libphonenumber() -> None:
    for c in default_country_table().countries:
        expected = phonenumbers.country_code_for_region(c.code)
        assert expected != 0, c.code
        if len(c.dial_code) == 5:
            # NANP area-code members.
            assert expected == 1, c.code
            assert c.dial_code.startswith("+1"), c.code
        else:
            assert c.dial_code == f"+{expected}", c.code


def test_every_time_zone_resolves() -> None:
    for c in default_country_table().countries:
        assert report_local_time(c.timezone).available, c.timezone


def test_shared_dial_code_order() -> None:
    table = default_country_table()
    assert [c.code for c in table.lookup("+1")] == ["US", "CA"]
    assert [c.code for c in table.lookup("+7")] == ["RU", "KZ"]
    assert table.lookup("+999") == ()


def test_flag_is_derived_from_code() -> None:
    assert flag_for_code("cn") == "\U0001F1E8\U0001F1F3"
    assert flag_for_code("X") == ""
    cn = default_country_table().by_code("CN")
    assert cn is not None and cn.flag == flag_for_code("CN")


def test_search_matches_names_codes_and_dial_codes() -> None:
    table = default_country_table()
    assert [c.code for c in table.search("china")] == ["CN"]
    assert "CN" in [c.code for c in table.search("中国")]
    assert [c.code for c in table.search("+86")] == ["CN"]
    assert "JP" in [c.code for c in table.search("jp")]
    assert table.search("   ") == []
    assert table.search("zzzz") == []


def test_common_list_follows_display_order() -> None:
    common = default_country_table().common()
    assert [c.dial_code for c in common] == list(COMMON_DIAL_CODES)
    assert common[0].code == "CN"
    assert common[1].code == "US"


def test_regions() -> None:
    table = default_country_table()
    regions = table.regions()
    assert "Asia" in regions and "Europe" in regions
    assert all(c.region == "Oceania" for c in table.by_region("Oceania"))


def test_load_custom_table(tmp_path: Path) -> None:
    p = tmp_path / "countries.yaml"
    p.write_text(
        "countries:\n"
        '  - {code: "xx", name: "X", name_en: "Exland", dial_code: "+999", timezone: "UTC"}\n',
        encoding="utf-8",
    )
    table = load_country_table(p)
    rec = table.by_code("XX")
    assert rec is not None
    assert rec.dial_code == "+999"
    assert rec.flag == flag_for_code("XX")
    assert rec.languages == ()


@pytest.mark.parametrize(
    "body",
    [
        'countries:\n  - {code: "XX", name: "X", name_en: "X", dial_code: "999", timezone: "UTC"}\n',
        'countries:\n  - {code: "XX", name: "X", name_en: "X", dial_code: "+12345", timezone: "UTC"}\n',
        'countries:\n  - {code: "XX", name: "X", dial_code: "+999", timezone: "UTC"}\n',
        "countries: nope\n",
        'countries:\n  - {code: "XX", name: "X", name_en: "X", dial_code: "+9", timezone: "UTC"}\n'
        '  - {code: "XX", name: "Y", name_en: "Y", dial_code: "+8", timezone: "UTC"}\n',
    ],
)
def test_invalid_country_data(tmp_path: Path, body: str) -> None:
    p = tmp_path / "countries.yaml"
    p.write_text(body, encoding="utf-8")
    with pytest.raises(ReferenceDataError):
        load_country_table(p)


def test_missing_country_file(tmp_path: Path) -> None:
    with pytest.raises(ReferenceDataError):
        load_country_table(tmp_path / "missing.yaml")
