"""
SEO and structured-data checks.

Deterministic, local checks used by the post editor: an on-page SEO score
for title, meta description, content and excerpt, and validators for the
JSON-LD Article and SoftwareApplication schemas the site publishes.

No AI calls are made here.
"""

import re
import unicodedata
from dataclasses import asdict, dataclass, field
from typing import Any, Literal

TITLE_MIN_CHARS = 30
TITLE_MAX_CHARS = 60
META_MIN_CHARS = 120
META_MAX_CHARS = 160
CONTENT_MIN_WORDS = 300
HEADLINE_MAX_CHARS = 110

ARTICLE_TYPES = ("Article", "NewsArticle", "BlogPosting")
SOFTWARE_TYPE = "SoftwareApplication"

ARTICLE_REQUIRED_FIELDS = ("@context", "@type", "headline", "author", "datePublished")
ARTICLE_RECOMMENDED_FIELDS = ("image", "description", "dateModified", "publisher")
SOFTWARE_REQUIRED_FIELDS = ("@context", "@type", "name", "operatingSystem")
SOFTWARE_RECOMMENDED_FIELDS = ("applicationCategory", "offers", "aggregateRating", "description")

REQUIRED_FIELD_PENALTY = 15
WRONG_TYPE_PENALTY = 10
RECOMMENDED_FIELD_PENALTY = 5

POWER_WORDS_REGEX = re.compile(r"hướng dẫn|cách|mẹo|top", re.IGNORECASE)
DIGIT_REGEX = re.compile(r"[0-9]")

WarningType = Literal["error", "warning", "info"]


@dataclass
class SEOWarning:
    type: WarningType
    field: str
    message: str


@dataclass
class SEOCheckResult:
    score: int
    warnings: list[SEOWarning] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SchemaValidationResult:
    is_valid: bool
    score: int
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    schema_type: str = "Unknown"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _nfc(text: str | None) -> str:
    return unicodedata.normalize("NFC", text) if text else ""


def _is_missing(value: Any) -> bool:
    """Empty-ish JSON-LD value: absent, null, false, empty string or zero."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)):
        return value == 0
    return False


# =============================================================================
# On-page SEO
# =============================================================================

def check_seo(
    title: str | None = None,
    meta_description: str | None = None,
    content: str | None = None,
    excerpt: str | None = None,
) -> SEOCheckResult:
    """
    Score a post's on-page SEO from 100 down.

    Lengths are counted in characters of NFC-normalised text so composed
    and decomposed Vietnamese diacritics count the same.

    Args:
        title: Post title
        meta_description: Meta description
        content: Post body
        excerpt: Post excerpt

    Returns:
        SEOCheckResult with score clamped to 0-100
    """
    warnings: list[SEOWarning] = []
    suggestions: list[str] = []
    score = 100

    title = _nfc(title)
    meta_description = _nfc(meta_description)

    # Title
    if title:
        title_length = len(title)
        if title_length < TITLE_MIN_CHARS:
            warnings.append(SEOWarning(
                "warning", "title",
                f"Tiêu đề quá ngắn ({title_length} ký tự). Nên từ 30-60 ký tự.",
            ))
            score -= 15
            suggestions.append("Mở rộng tiêu đề để bao gồm từ khóa và thu hút hơn")
        elif title_length > TITLE_MAX_CHARS:
            warnings.append(SEOWarning(
                "error", "title",
                f"Tiêu đề quá dài ({title_length} ký tự). Nên tối đa 60 ký tự để hiển thị tốt trên Google.",
            ))
            score -= 20
            suggestions.append("Rút gọn tiêu đề, giữ lại từ khóa chính")

        if not DIGIT_REGEX.search(title) and not POWER_WORDS_REGEX.search(title):
            suggestions.append("Cân nhắc thêm số hoặc từ power words (Hướng dẫn, Top, Cách...)")
    else:
        warnings.append(SEOWarning("error", "title", "Chưa có tiêu đề"))
        score -= 30

    # Meta description
    if meta_description:
        meta_length = len(meta_description)
        if meta_length < META_MIN_CHARS:
            warnings.append(SEOWarning(
                "warning", "meta_description",
                f"Meta description ngắn ({meta_length} ký tự). Nên từ 120-160 ký tự.",
            ))
            score -= 10
        elif meta_length > META_MAX_CHARS:
            warnings.append(SEOWarning(
                "error", "meta_description",
                f"Meta description quá dài ({meta_length} ký tự). Sẽ bị cắt trên Google.",
            ))
            score -= 15
    else:
        warnings.append(SEOWarning(
            "warning", "meta_description",
            "Chưa có meta description. Google có thể tự động tạo.",
        ))
        score -= 10
        suggestions.append("Thêm meta description để kiểm soát nội dung hiển thị trên Google")

    # Content
    if content:
        word_count = len(content.split())
        if word_count < CONTENT_MIN_WORDS:
            warnings.append(SEOWarning(
                "warning", "content",
                f"Nội dung ngắn ({word_count} từ). Bài dài >1000 từ thường xếp hạng tốt hơn.",
            ))
            score -= 10

    # Excerpt
    if not excerpt:
        warnings.append(SEOWarning("info", "excerpt", "Chưa có excerpt. Nên thêm để hiển thị tốt hơn."))
        score -= 5

    return SEOCheckResult(score=max(0, score), warnings=warnings, suggestions=suggestions)


# =============================================================================
# JSON-LD validation
# =============================================================================

def _check_fields(
    data: dict[str, Any],
    required: tuple[str, ...],
    recommended: tuple[str, ...],
    errors: list[str],
    warnings: list[str],
) -> int:
    """Record missing fields and return the score penalty."""
    penalty = 0
    for name in required:
        if _is_missing(data.get(name)):
            errors.append(f"Thiếu trường bắt buộc: {name}")
            penalty += REQUIRED_FIELD_PENALTY
    for name in recommended:
        if _is_missing(data.get(name)):
            warnings.append(f"Nên thêm trường: {name}")
            penalty += RECOMMENDED_FIELD_PENALTY
    return penalty


def _schema_type(data: dict[str, Any]) -> str:
    value = data.get("@type")
    return "Unknown" if _is_missing(value) else str(value)


def validate_article_schema(data: dict[str, Any]) -> SchemaValidationResult:
    """Validate Article / NewsArticle / BlogPosting JSON-LD."""
    errors: list[str] = []
    warnings: list[str] = []
    suggestions: list[str] = []

    score = 100 - _check_fields(
        data, ARTICLE_REQUIRED_FIELDS, ARTICLE_RECOMMENDED_FIELDS, errors, warnings
    )

    schema_type = data.get("@type")
    if not _is_missing(schema_type) and schema_type not in ARTICLE_TYPES:
        errors.append("@type phải là Article, NewsArticle, hoặc BlogPosting")
        score -= WRONG_TYPE_PENALTY

    headline = data.get("headline")
    if isinstance(headline, str) and len(headline) > HEADLINE_MAX_CHARS:
        warnings.append("headline nên dưới 110 ký tự")
        score -= 5

    if errors:
        suggestions.append("Thêm các trường bắt buộc để cải thiện SEO")
    if _is_missing(data.get("author")):
        suggestions.append("Thêm thông tin tác giả để tăng độ uy tín")
    if _is_missing(data.get("image")):
        suggestions.append("Thêm ảnh đại diện để hiển thị tốt trên mạng xã hội")

    return SchemaValidationResult(
        is_valid=not errors,
        score=max(0, score),
        errors=errors,
        warnings=warnings,
        suggestions=suggestions,
        schema_type=_schema_type(data),
    )


def validate_software_schema(data: dict[str, Any]) -> SchemaValidationResult:
    """Validate SoftwareApplication JSON-LD."""
    errors: list[str] = []
    warnings: list[str] = []
    suggestions: list[str] = []

    score = 100 - _check_fields(
        data, SOFTWARE_REQUIRED_FIELDS, SOFTWARE_RECOMMENDED_FIELDS, errors, warnings
    )

    schema_type = data.get("@type")
    if not _is_missing(schema_type) and schema_type != SOFTWARE_TYPE:
        errors.append("@type phải là SoftwareApplication")
        score -= WRONG_TYPE_PENALTY

    if errors:
        suggestions.append("Thêm các trường bắt buộc để schema hợp lệ")
    if _is_missing(data.get("description")):
        suggestions.append("Thêm mô tả chi tiết về phần mềm")

    return SchemaValidationResult(
        is_valid=not errors,
        score=max(0, score),
        errors=errors,
        warnings=warnings,
        suggestions=suggestions,
        schema_type=_schema_type(data),
    )


def validate_schema(data: dict[str, Any], schema_type: str | None = None) -> SchemaValidationResult:
    """Dispatch to the software or article validator."""
    if schema_type == "software" or data.get("@type") == SOFTWARE_TYPE:
        return validate_software_schema(data)
    return validate_article_schema(data)
