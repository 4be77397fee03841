"""System/user prompt construction for reading-card segmentation."""

from __future__ import annotations

from okuma.extraction.page_range import ALL_PAGES
from okuma.segmentation.models import (
    STRUCTURED_VARIANT,
    PromptOptions,
    ResponseContract,
    SegmentationRequest,
)


_DELIMITED_RULES = """Sen bir PDF okuma asistanısın. Amacın, okuyucunun okuma alışkanlığı kazanması ve PDF içeriğini kolayca takip edebilmesi için "okuma kartları" oluşturmak.

Bu belge içeriğini analiz ederek:
1. Metni sadece konusuna ve bütünlüğe göre anlamlı parçalara ayır
2. Her bölüm için bir "okuma kartı" oluştur
3. Kelimeleri değiştirme, metni olduğu gibi koru; hiçbir kelimeyi atlama
4. İçerikten türetilmeyen başlık ekleme
5. PDF sıralamasına sadık kal
6. Her kartı "=== KART [NUMARA] ===" ile ayır, numaralandırmaya 1'den başla"""

_STRUCTURED_RULES = """7. Her kart için içerikten bir ana başlık ve bir alt başlık çıkar
8. Kart metninden önce bu başlıkları ayrı satırlarda "Ana Başlık:" ve "Alt Başlık:" etiketleriyle yaz
9. Bir ana başlık birden fazla karta yayılabilir; aynı ana başlığı ilgili kartlarda tekrar kullan"""

_DELIMITED_EXAMPLE = """Örnek format:
=== KART 1 ===
[Orijinal metin bölümü]

=== KART 2 ===
[Orijinal metin bölümü]"""

_STRUCTURED_EXAMPLE = """Örnek format:
=== KART 1 ===
Ana Başlık: [Ana başlık]
Alt Başlık: [Alt başlık]
[Orijinal metin bölümü]

=== KART 2 ===
Ana Başlık: [Ana başlık]
Alt Başlık: [Alt başlık]
[Orijinal metin bölümü]"""

_JSON_RULES = """Sen bir PDF okuma asistanısın. Amacın, okuyucunun düzenli okuma alışkanlığı kazanmasını sağlamak ve içeriği daha kolay takip edebilmesi için içeriği "okuma kartlarına" dönüştürmek.

Kurallar:
- Metindeki kelimeleri değiştirme, olduğu gibi koru
- Metni sadece konu başlıklarına ve bütünlüğe göre parçalara ayır
- Kartların sırası, orijinal sıralamaya sadık kalsın
- Ek özet, yorum veya açıklama ekleme
- Her kart için içerikten türetilen bir başlık oluştur"""

_JSON_STRUCTURED_RULE = '- Başlığı "Ana Başlık / Alt Başlık" biçiminde yaz; bir ana başlık birden fazla karta yayılabilir'

_JSON_FORMAT = """Yanıtı SADECE geçerli JSON olarak döndür, JSON dışında hiçbir metin yazma:
{"cards": [{"title": "Kart başlığı", "content": "Orijinal metin içeriği"}]}

İçerik kartlara ayrılamıyorsa yalnızca şunu döndür:
{"error": "Hata açıklaması", "cards": []}"""

_JSON_USER_PREFIX = "Lütfen aşağıdaki içeriği okuma kartlarına dönüştür:\n\n"


def _page_range_instruction(hint: str | None) -> str | None:
    value = (hint or "").strip()
    if not value or value == ALL_PAGES:
        return None
    return f"Yalnızca {value} sayfa aralığındaki içeriği analiz et; bu aralığın dışındaki sayfaları kartlara dahil etme."


def _extra_instruction(extra: str | None) -> str | None:
    value = (extra or "").strip()
    if not value:
        return None
    return f"Ek talimatlar (yukarıdaki kurallarla çelişmedikçe uygula):\n{value}"


def _builtin_instructions(options: PromptOptions) -> str:
    structured = options.prompt_variant == STRUCTURED_VARIANT
    if options.contract is ResponseContract.JSON:
        rules = _JSON_RULES + ("\n" + _JSON_STRUCTURED_RULE if structured else "")
        return f"{rules}\n\n{_JSON_FORMAT}"

    rules = _DELIMITED_RULES + ("\n" + _STRUCTURED_RULES if structured else "")
    example = _STRUCTURED_EXAMPLE if structured else _DELIMITED_EXAMPLE
    return f"{rules}\n\n{example}"


def build_request(text: str, options: PromptOptions | None = None) -> SegmentationRequest:
    """Build system instructions and user payload for a segmentation call."""

    resolved = options or PromptOptions()
    body = text.strip()
    if not body:
        raise ValueError("text cannot be empty")

    if resolved.is_custom:
        if not resolved.prompt_variant.strip():
            raise ValueError("custom prompt cannot be empty")
        sections = [resolved.prompt_variant]
    else:
        sections = [_builtin_instructions(resolved)]
        extra = _extra_instruction(resolved.extra_instructions)
        if extra:
            sections.append(extra)

    range_rule = _page_range_instruction(resolved.page_range_hint)
    if range_rule:
        sections.append(range_rule)

    payload = _JSON_USER_PREFIX + body if resolved.contract is ResponseContract.JSON and not resolved.is_custom else body

    return SegmentationRequest(
        system_instructions="\n\n".join(sections),
        user_payload=payload,
        contract=resolved.contract,
    )
