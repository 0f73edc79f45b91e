import pytest

from conftest import build_pdf
from resume_insight.exceptions import ExtractionFailed
from resume_insight.services.text_extractor import extract_text


def test_extracts_trimmed_text(resume_pdf):
    text = extract_text(resume_pdf)

    assert "John Doe" in text
    assert "5 years backend experience" in text
    assert text == text.strip()


def test_joins_pages_in_order():
    text = extract_text(build_pdf("First page skills", "Second page education"))

    assert text.index("First page skills") < text.index("Second page education")


def test_blank_pdf_is_rejected():
    with pytest.raises(ExtractionFailed, match="empty text"):
        extract_text(build_pdf(""))


@pytest.mark.parametrize("payload", [b"", b"this is not a pdf", b"%PDF-1.7\n%%EOF garbage"])
def test_corrupt_or_empty_bytes_are_rejected(payload):
    with pytest.raises(ExtractionFailed):
        extract_text(payload)


def test_truncated_pdf_is_rejected(resume_pdf):
    with pytest.raises(ExtractionFailed):
        extract_text(resume_pdf[:64])
