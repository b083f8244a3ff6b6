"""Popular-area synonym table.

Maps each canonical popular area (ย่าน) to the spellings, languages and
BTS/MRT station names people use for it, plus the administrative
districts/subdistricts that make it up. ``expand`` turns an area name into
the set of terms a substring search should try.

Aliases are indexed in both directions: the canonical name, and every alias
expand to the same set. District names are forward-only because several
areas share a district (วัฒนา sits under Sukhumvit, Thong Lo, Ekkamai, Nana
and Asoke).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AreaSynonyms:
    aliases: tuple[str, ...] = ()
    districts: tuple[str, ...] = ()


AREA_SYNONYMS: dict[str, AreaSynonyms] = {
    "อ่อนนุช": AreaSynonyms(
        aliases=("On Nut", "Onnut"),
        districts=("พระโขนงเหนือ", "สวนหลวง", "Phra Khanong"),
    ),
    "บางนา": AreaSynonyms(
        aliases=("Bang Na", "Bangna"),
        districts=("สรรพาวุธ", "ลาซาล", "แบริ่ง"),
    ),
    "ลาดพร้าว": AreaSynonyms(
        aliases=("Lat Phrao", "Latphrao", "ห้าแยกลาดพร้าว", "Ha Yaek Lat Phrao"),
        districts=("วังทองหลาง", "จตุจักร"),
    ),
    "พระราม 9": AreaSynonyms(
        aliases=("Rama 9", "Rama9", "พระราม9", "พระรามเก้า"),
        districts=("ห้วยขวาง", "บางกะปิ", "ดินแดง"),
    ),
    "สุขุมวิท": AreaSynonyms(
        aliases=("Sukhumvit",),
        districts=("คลองเตย", "วัฒนา", "พระโขนง"),
    ),
    "อารีย์": AreaSynonyms(
        aliases=("Ari",),
        districts=("สามเสนใน", "พญาไท", "Samsen Nai"),
    ),
    "ทองหล่อ": AreaSynonyms(
        aliases=("Thong Lo", "Thonglor", "Thonglo", "Sukhumvit 55"),
        districts=("คลองตันเหนือ", "วัฒนา"),
    ),
    "เอกมัย": AreaSynonyms(
        aliases=("Ekkamai",),
        districts=("คลองตันเหนือ", "พระโขนงเหนือ", "วัฒนา"),
    ),
    "สยาม": AreaSynonyms(
        aliases=("Siam",),
        districts=("ปทุมวัน", "รองเมือง", "Pathum Wan"),
    ),
    "รัชดา": AreaSynonyms(
        aliases=("Ratchada", "Ratchadaphisek"),
        districts=("ห้วยขวาง", "ดินแดง", "จตุจักร"),
    ),
    "ปิ่นเกล้า": AreaSynonyms(
        aliases=("Pinklao", "Pin Klao"),
        districts=("บางพลัด", "อรุณอมรินทร์", "บางกอกน้อย"),
    ),
    "นนทบุรี": AreaSynonyms(
        aliases=("Nonthaburi",),
        districts=("เมืองนนทบุรี", "ปากเกร็ด", "บางบัวทอง"),
    ),
    "รามอินทรา": AreaSynonyms(
        aliases=("Ram Intra", "Ramintra"),
        districts=("คันนายาว", "สายไหม", "บางเขน"),
    ),
    "สาทร": AreaSynonyms(
        aliases=("Sathon", "Sathorn"),
        districts=("ทุ่งมหาเมฆ", "ยานนาวา"),
    ),
    "สีลม": AreaSynonyms(
        aliases=("Silom",),
        districts=("สุริยวงศ์", "บางรัก"),
    ),
    "พญาไท": AreaSynonyms(
        aliases=("Phaya Thai",),
        districts=("ราชเทวี",),
    ),
    "ราชเทวี": AreaSynonyms(
        aliases=("Ratchathewi",),
        districts=("ทุ่งพญาไท",),
    ),
    "สะพานควาย": AreaSynonyms(
        aliases=("Saphan Khwai", "Saphan Kwai"),
        districts=("สามเสนใน", "พญาไท", "จตุจักร"),
    ),
    "พหลโยธิน": AreaSynonyms(
        aliases=("Phahonyothin",),
        districts=("จตุจักร", "ลาดยาว"),
    ),
    "เจริญกรุง": AreaSynonyms(
        aliases=("Charoen Krung",),
        districts=("บางคอแหลม", "ยานนาวา"),
    ),
    "พัฒนาการ": AreaSynonyms(
        aliases=("Phatthanakan", "Pattanakarn"),
        districts=("สวนหลวง", "ประเวศ"),
    ),
    "ศรีนครินทร์": AreaSynonyms(
        aliases=("Srinakarin", "Srinagarindra"),
        districts=("หนองบอน", "ประเวศ", "บางนา"),
    ),
    "เพชรบุรี": AreaSynonyms(
        aliases=("Phetchaburi",),
        districts=("บางกะปิ", "ห้วยขวาง", "มักกะสัน"),
    ),
    "พร้อมพงษ์": AreaSynonyms(
        aliases=("Phrom Phong", "Sukhumvit 24"),
        districts=("คลองตัน", "คลองเตย"),
    ),
    "นานา": AreaSynonyms(
        aliases=("Nana",),
        districts=("คลองเตย", "วัฒนา"),
    ),
    "อโศก": AreaSynonyms(
        aliases=("Asoke", "Asok", "Sukhumvit 21"),
        districts=("คลองเตยเหนือ", "วัฒนา"),
    ),
    "บางซื่อ": AreaSynonyms(
        aliases=("Bang Sue", "Bangsue"),
    ),
    "อนุสาวรีย์ชัย": AreaSynonyms(
        aliases=("Victory Monument", "อนุสาวรีย์", "อนุสาวรีย์ชัยสมรภูมิ"),
        districts=("ราชเทวี", "พญาไท"),
    ),
}

# Wizard default area choices, in display order
POPULAR_AREAS: tuple[str, ...] = tuple(AREA_SYNONYMS)


def _key(term: str) -> str:
    return term.strip().lower()


def _build_alias_index() -> dict[str, str]:
    index: dict[str, str] = {}
    for canonical, synonyms in AREA_SYNONYMS.items():
        index[_key(canonical)] = canonical
        for alias in synonyms.aliases:
            # First declaration wins if two areas ever share a spelling
            index.setdefault(_key(alias), canonical)
    return index


_ALIAS_INDEX = _build_alias_index()


def canonical_area(term: str) -> str | None:
    """Return the canonical popular-area name for *term*, or None."""
    if not term:
        return None
    return _ALIAS_INDEX.get(_key(term))


def expand(term: str) -> set[str]:
    """Return *term* plus every synonym the table defines for it.

    Lookup is exact on the lower-cased, stripped term. Unknown terms come
    back as ``{term}`` so callers fall through to plain substring matching.
    """
    canonical = canonical_area(term)
    if canonical is None:
        return {term}

    synonyms = AREA_SYNONYMS[canonical]
    return {term, canonical, *synonyms.aliases, *synonyms.districts}
