"""
Test that non-Latin text never breaks PDF rendering.

Only the built-in Helvetica family is used, so Cyrillic and symbols cannot
be drawn. They must degrade to blanks or be stripped, never abort the
document or drop whole sections.
"""
from noteflow.document_builder import DocumentBuilder, create_pdf_from_sections
from noteflow.document_builder.text_layout import normalize_text
from noteflow.section import Section

CYRILLIC_SECTIONS = [
    Section(heading="Тест кириллицы", body_text="Литовские пословицы и поговорки"),
    Section(heading="Mixed", body_text="Жизнь — счастье в труде. Time → money."),
    Section(heading="Alphabet", body_text="АБВГДЕЁЖЗИЙКЛМНОПРСТУФХЦЧШЩЪЫЬЭЮЯ"),
]


def test_cyrillic_sections_render():
    builder = DocumentBuilder("Проверка / Check")
    builder.add_sections(CYRILLIC_SECTIONS)
    pdf_bytes = builder.finalize()

    assert pdf_bytes.startswith(b"%PDF")
    assert builder.engine.dropped_lines == 0
    texts = [run.text for page in builder.pages for run in page.text_runs]
    assert "Mixed" in texts
    assert any("Time" in text and "money." in text for text in texts)
    for text in texts:
        text.encode("cp1252")


def test_normalized_text_is_plain_ascii():
    assert normalize_text("Жизнь — счастье").strip() == ""
    assert normalize_text("naïve café").encode("ascii")


def test_helper_returns_pdf_bytes():
    assert create_pdf_from_sections("Notes", CYRILLIC_SECTIONS).startswith(b"%PDF")
