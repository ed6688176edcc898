"""
Unit tests for the SEO score and JSON-LD schema validators.
"""

import unicodedata

import pytest

from golden_ai.services.seo import (
    check_seo,
    validate_article_schema,
    validate_schema,
    validate_software_schema,
)

GOOD_TITLE = "Hướng dẫn khai báo hải quan điện tử trên VNACCS 2025"
GOOD_META = "m" * 130
GOOD_CONTENT = " ".join(["từ"] * 350)

ARTICLE = {
    "@context": "https://schema.org",
    "@type": "Article",
    "headline": "Hướng dẫn khai báo hải quan",
    "author": {"@type": "Organization", "name": "Golden Logistics"},
    "datePublished": "2025-01-10",
    "image": "https://golden.example/cover.jpg",
    "description": "Mô tả",
    "dateModified": "2025-01-11",
    "publisher": {"@type": "Organization", "name": "Golden Logistics"},
}

SOFTWARE = {
    "@context": "https://schema.org",
    "@type": "SoftwareApplication",
    "name": "ECUS5",
    "operatingSystem": "Windows",
    "applicationCategory": "BusinessApplication",
    "offers": {"@type": "Offer", "price": "0"},
    "aggregateRating": {"@type": "AggregateRating", "ratingValue": "4.8"},
    "description": "Phần mềm khai báo hải quan",
}


class TestCheckSeo:

    def test_perfect_post(self):
        result = check_seo(GOOD_TITLE, GOOD_META, GOOD_CONTENT, "Tóm tắt")

        assert result.score == 100
        assert result.warnings == []
        assert result.suggestions == []

    def test_short_title(self):
        result = check_seo("Hướng dẫn khai báo hải quan", GOOD_META, GOOD_CONTENT, "Tóm tắt")

        assert result.score == 85
        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert warning.type == "warning"
        assert warning.field == "title"
        assert warning.message.startswith("Tiêu đề quá ngắn")
        assert result.suggestions == ["Mở rộng tiêu đề để bao gồm từ khóa và thu hút hơn"]

    def test_long_title(self):
        result = check_seo("Top " + "x" * 70, GOOD_META, GOOD_CONTENT, "Tóm tắt")

        assert result.score == 80
        assert result.warnings[0].type == "error"

    def test_title_without_number_or_power_word(self):
        result = check_seo("Quy định mới về thuế xuất nhập khẩu hàng hóa", GOOD_META, GOOD_CONTENT, "e")

        assert result.score == 100
        assert result.suggestions == ["Cân nhắc thêm số hoặc từ power words (Hướng dẫn, Top, Cách...)"]

    def test_decomposed_diacritics_counted_as_composed(self):
        composed = "Hướng dẫn thủ tục khai báo hải quan điện tử cho doanh nghiệp"
        decomposed = unicodedata.normalize("NFD", composed)
        assert len(composed) == 60
        assert len(decomposed) > 60

        result = check_seo(decomposed, GOOD_META, GOOD_CONTENT, "e")

        assert result.score == 100
        assert result.warnings == []

    def test_missing_everything(self):
        result = check_seo()

        assert result.score == 55
        fields = [w.field for w in result.warnings]
        assert fields == ["title", "meta_description", "excerpt"]

    @pytest.mark.parametrize(
        ("meta", "penalty"),
        [("m" * 119, 10), ("m" * 120, 0), ("m" * 160, 0), ("m" * 161, 15)],
    )
    def test_meta_bounds(self, meta, penalty):
        assert check_seo(GOOD_TITLE, meta, GOOD_CONTENT, "e").score == 100 - penalty

    def test_short_content(self):
        result = check_seo(GOOD_TITLE, GOOD_META, "vài từ ngắn", "e")

        assert result.score == 90
        assert result.warnings[0].message.startswith("Nội dung ngắn (3 từ)")

    def test_score_never_negative(self):
        result = check_seo("x" * 80, "m" * 200, "ngắn", None)

        assert 0 <= result.score <= 100

    def test_to_dict(self):
        data = check_seo(None, GOOD_META, GOOD_CONTENT, "e").to_dict()

        assert data["score"] == 70
        assert data["warnings"] == [{"type": "error", "field": "title", "message": "Chưa có tiêu đề"}]


class TestArticleSchema:

    def test_complete_article(self):
        result = validate_article_schema(ARTICLE)

        assert result.is_valid
        assert result.score == 100
        assert result.schema_type == "Article"
        assert result.errors == []
        assert result.warnings == []

    def test_missing_required_and_recommended(self):
        data = {k: v for k, v in ARTICLE.items() if k not in ("author", "image")}

        result = validate_article_schema(data)

        assert not result.is_valid
        assert result.score == 80
        assert result.errors == ["Thiếu trường bắt buộc: author"]
        assert result.warnings == ["Nên thêm trường: image"]
        assert "Thêm thông tin tác giả để tăng độ uy tín" in result.suggestions

    def test_falsy_values_count_as_missing(self):
        result = validate_article_schema({**ARTICLE, "headline": "", "datePublished": None})

        assert result.errors == [
            "Thiếu trường bắt buộc: headline",
            "Thiếu trường bắt buộc: datePublished",
        ]

    def test_wrong_type(self):
        result = validate_article_schema({**ARTICLE, "@type": "Product"})

        assert not result.is_valid
        assert result.score == 90
        assert result.schema_type == "Product"

    def test_long_headline(self):
        result = validate_article_schema({**ARTICLE, "headline": "h" * 111})

        assert result.is_valid
        assert result.score == 95

    def test_empty_object(self):
        result = validate_article_schema({})

        assert result.schema_type == "Unknown"
        assert result.score == 5


class TestSoftwareSchema:

    def test_complete_software(self):
        result = validate_software_schema(SOFTWARE)

        assert result.is_valid
        assert result.score == 100

    def test_missing_operating_system(self):
        data = {k: v for k, v in SOFTWARE.items() if k != "operatingSystem"}

        result = validate_software_schema(data)

        assert result.errors == ["Thiếu trường bắt buộc: operatingSystem"]
        assert result.score == 85


class TestValidateSchemaDispatch:

    def test_dispatch_by_type_field(self):
        assert validate_schema(SOFTWARE).is_valid

    def test_dispatch_by_hint(self):
        result = validate_schema({"@type": "Article"}, schema_type="software")

        assert "@type phải là SoftwareApplication" in result.errors

    def test_defaults_to_article(self):
        assert validate_schema(ARTICLE).schema_type == "Article"
