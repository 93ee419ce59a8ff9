"""Share Links: pre-formatted outbound message URLs and village deep links.

Invariants:
    - Message text is URL-encoded exactly once
    - Village deep links use the `v` query parameter read by the home view
    - QR codes are external image-service URLs; no image is produced here
"""

from urllib.parse import quote, urlencode

from samaj_diary.models import Member

WHATSAPP_COMPOSE = "https://wa.me/"
QR_SERVICE = "https://api.qrserver.com/v1/create-qr-code/"


def whatsapp_compose_url(text: str, phone: str | None = None) -> str:
    return f"{WHATSAPP_COMPOSE}{phone or ''}?text={quote(text, safe='')}"


def app_share_text(app_name: str, public_url: str) -> str:
    return (
        f"*{app_name}*\n"
        "समाज के सभी सदस्यों की जानकारी के लिए डिजिटल मोबाइल डायरी ऐप। "
        f"यहाँ क्लिक करें:\n{public_url}"
    )


def member_share_text(app_name: str, member: Member) -> str:
    return (
        f"*{app_name}*\n"
        f"नाम: {member.name}\n"
        f"गाँव: {member.village_name}\n"
        f"मोबाइल: {member.mobile}\n"
        f"पिता/पति: {member.father_name}"
    )


def deletion_request_text(
    name: str, father_name: str, village_name: str, mobile: str,
) -> str:
    return (
        "नमस्ते एडमिन, मैं समाज की डायरी से अपनी जानकारी हटाना चाहता हूँ।\n\n"
        f"नाम: {name}\n"
        f"पिता/पति: {father_name}\n"
        f"गाँव: {village_name}\n"
        f"हटाया जाने वाला मोबाइल: {mobile}"
    )


def village_deep_link(public_url: str, village_id: str) -> str:
    return f"{public_url}?{urlencode({'v': village_id})}"


def qr_code_url(data: str, size: int = 500) -> str:
    return f"{QR_SERVICE}?{urlencode({'size': f'{size}x{size}', 'data': data})}"
